"""Markdown/MDX passthrough converter."""

from pathlib import Path

import yaml

from docconverter.converters.base import BaseConverter, ConversionResult
from docconverter.utils.text_utils import FRONTMATTER_BLOCK_RE


def has_frontmatter(content: str) -> bool:
    """True when content opens with a YAML block holding at least one non-empty key."""
    match = FRONTMATTER_BLOCK_RE.match(content)
    if not match:
        return False

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        # Present but broken; repair decides what to do with it
        return True

    if not isinstance(data, dict):
        return False
    return any(value not in (None, "", [], {}) for value in data.values())


class MarkdownConverter(BaseConverter):
    """Pass Markdown and MDX through unchanged."""

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [".md", ".mdx", ".markdown"]

    def convert(self, file_path: Path) -> ConversionResult:
        try:
            content = self._read_text(file_path)
        except (OSError, UnicodeDecodeError) as e:
            return self._create_error_result(file_path, str(e))

        return self._create_success_result(
            file_path,
            content,
            needs_frontmatter=not has_frontmatter(content),
        )
