"""Plain text to Markdown converter."""

import re
from pathlib import Path

from docconverter.converters.base import BaseConverter, ConversionResult

_BULLET_RE = re.compile(r"^(\s*)[-*•]\s+(.*)$")


def _is_indented(line: str) -> bool:
    return bool(line.strip()) and (line.startswith("    ") or line.startswith("\t"))


def _next_nonblank(lines: list[str], index: int) -> str | None:
    for line in lines[index + 1:]:
        if line.strip():
            return line
    return None


def _is_label(stripped: str) -> bool:
    return (
        len(stripped) > 1
        and len(stripped) < 80
        and stripped.endswith(":")
        and not stripped.startswith(("#", "-", "*", "•"))
    )


def text_to_markdown(text: str) -> str:
    """Apply light structure to plain text.

    Indented runs become fenced code, 'Label:' lines followed by more
    content become level-2 headings and bullet glyphs normalize to '-'.
    """
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    out: list[str] = []
    in_code = False

    for i, line in enumerate(lines):
        if _is_indented(line):
            if not in_code:
                out.append("```")
                in_code = True
            out.append(line[4:] if line.startswith("    ") else line[1:])
            continue

        if in_code:
            following = _next_nonblank(lines, i)
            if not line.strip() and following is not None and _is_indented(following):
                out.append("")
                continue
            out.append("```")
            in_code = False

        stripped = line.strip()
        if _is_label(stripped) and _next_nonblank(lines, i) is not None:
            out.append(f"## {stripped[:-1].strip()}")
            continue

        bullet = _BULLET_RE.match(line)
        if bullet:
            out.append(f"{bullet.group(1)}- {bullet.group(2)}")
            continue

        out.append(line.rstrip())

    if in_code:
        out.append("```")

    return re.sub(r"\n{3,}", "\n\n", "\n".join(out)).strip()


class PlainTextConverter(BaseConverter):
    """Convert text-based files (notes, logs, source, config) to Markdown."""

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [".txt"]

    def convert(self, file_path: Path) -> ConversionResult:
        try:
            text = self._read_text(file_path)
        except (OSError, UnicodeDecodeError) as e:
            return self._create_error_result(file_path, str(e))

        return self._create_success_result(file_path, text_to_markdown(text))
