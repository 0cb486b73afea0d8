"""JSON to Markdown converter for API specs, config files and schemas."""

import json
from pathlib import Path
from typing import Any

from docconverter.converters.base import BaseConverter, ConversionResult
from docconverter.utils.text_utils import humanize_filename


def _section_title(key: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in key.replace("_", " ").replace("-", " ").split())


def _json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _table_cell(value: Any) -> str:
    text = value if isinstance(value, str) else _json(value)
    return text.replace("|", "\\|").replace("\n", " ")


def _type_name(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return "object"


def is_api_spec(data: dict) -> bool:
    return bool(data.get("openapi") or data.get("swagger") or isinstance(data.get("paths"), dict))


def is_config_file(data: dict) -> bool:
    return any(data.get(key) for key in ("name", "version", "scripts", "dependencies", "config"))


def is_data_schema(data: dict) -> bool:
    return bool(data.get("$schema") or data.get("type") == "object" or data.get("properties"))


def format_api_spec(data: dict) -> str:
    info = data.get("info") or {}
    lines = [
        f"# {info.get('title') or 'API Specification'}",
        "",
        info.get("description") or "API documentation generated from OpenAPI specification.",
        "",
        f"**Version:** {info.get('version') or '1.0.0'}",
        "",
    ]

    servers = data.get("servers") or []
    if servers:
        lines += ["## Servers", ""]
        for server in servers:
            entry = f"- {server.get('url', '')}"
            if server.get("description"):
                entry += f" - {server['description']}"
            lines.append(entry)
        lines.append("")

    paths = data.get("paths") or {}
    if paths:
        lines += ["## API Endpoints", ""]
        for path, methods in paths.items():
            lines += [f"### `{path}`", ""]
            if not isinstance(methods, dict):
                continue
            for method, operation in methods.items():
                lines += [f"#### {method.upper()}", ""]
                if isinstance(operation, dict):
                    for key in ("summary", "description"):
                        if operation.get(key):
                            lines += [str(operation[key]), ""]

    return "\n".join(lines)


def _config_value(value: Any) -> str:
    if isinstance(value, list):
        return "\n".join(f"- {item}" for item in value)
    if isinstance(value, dict):
        return "\n".join(f"- **{key}**: {_json(item)}" for key, item in value.items())
    return str(value)


def format_config(data: dict, filename: str) -> str:
    lines = [
        f"# {data.get('name') or Path(filename).stem}",
        "",
        data.get("description") or "Configuration file documentation.",
        "",
    ]
    if data.get("version"):
        lines += [f"**Version:** {data['version']}", ""]

    for key, value in data.items():
        if key in ("name", "version", "description"):
            continue
        lines += [f"## {_section_title(key)}", "", _config_value(value), ""]

    return "\n".join(lines)


def format_schema(data: dict) -> str:
    lines = [
        f"# {data.get('title') or 'Data Schema'}",
        "",
        data.get("description") or "Data schema documentation.",
        "",
    ]
    if data.get("type"):
        lines += [f"**Type:** {data['type']}", ""]

    properties = data.get("properties") or {}
    if properties:
        lines += ["## Properties", ""]
        for name, prop in properties.items():
            lines += [f"### `{name}`", ""]
            if not isinstance(prop, dict):
                continue
            if prop.get("type"):
                lines += [f"**Type:** {prop['type']}", ""]
            if prop.get("description"):
                lines += [str(prop["description"]), ""]
            if "example" in prop:
                lines += [f"**Example:** `{prop['example']}`", ""]

    return "\n".join(lines)


def format_generic(data: Any, filename: str) -> str:
    lines = [
        f"# {humanize_filename(filename)}",
        "",
        "JSON data documentation.",
        "",
        "## Data Structure",
        "",
        "```json",
        json.dumps(data, indent=2, ensure_ascii=False),
        "```",
        "",
    ]

    flat = isinstance(data, dict) and all(not isinstance(v, dict) for v in data.values())
    if flat and data:
        lines += ["## Properties", "", "| Property | Type | Value |", "|----------|------|-------|"]
        for key, value in data.items():
            lines.append(f"| {key} | {_type_name(value)} | {_table_cell(value)} |")

    return "\n".join(lines)


def json_to_markdown(data: Any, filename: str) -> str:
    """Pick a page layout based on the document's shape."""
    if isinstance(data, dict):
        if is_api_spec(data):
            return format_api_spec(data)
        if is_config_file(data):
            return format_config(data, filename)
        if is_data_schema(data):
            return format_schema(data)
    return format_generic(data, filename)


class JSONConverter(BaseConverter):
    """Convert JSON documents to a readable Markdown page."""

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [".json"]

    def convert(self, file_path: Path) -> ConversionResult:
        try:
            data = json.loads(self._read_text(file_path))
        except (OSError, UnicodeDecodeError) as e:
            return self._create_error_result(file_path, str(e))
        except json.JSONDecodeError as e:
            return self._create_error_result(file_path, f"Failed to process JSON: {e}")

        markdown = json_to_markdown(data, file_path.name)
        return self._create_success_result(file_path, self._clean_markdown(markdown))
