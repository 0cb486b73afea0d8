"""RTF to Markdown converter."""

import re
from pathlib import Path

from docconverter.converters.base import BaseConverter, ConversionResult
from docconverter.converters.text import text_to_markdown

# Groups whose text is never shown
_DESTINATIONS = {
    "fonttbl", "colortbl", "stylesheet", "info", "pict", "header", "footer",
    "headerl", "headerr", "footerl", "footerr", "listtable", "listoverridetable",
    "rsidtbl", "generator", "themedata", "colorschememapping", "datastore",
    "latentstyles", "xmlnstbl", "filetbl", "object",
}
_SPECIAL_WORDS = {
    "par": "\n",
    "line": "\n",
    "sect": "\n",
    "page": "\n",
    "tab": "\t",
    "emdash": "\u2014",
    "endash": "\u2013",
    "bullet": "\u2022",
    "lquote": "\u2018",
    "rquote": "\u2019",
    "ldblquote": "\u201c",
    "rdblquote": "\u201d",
}
_TOKEN_RE = re.compile(
    r"\\([a-zA-Z]+)(-?\d+)? ?"  # control word
    r"|\\'([0-9a-fA-F]{2})"  # hex escape
    r"|\\([^a-zA-Z])"  # control symbol
    r"|([{}])"
    r"|([^\\{}]+)",
    re.S,
)


def rtf_to_text(rtf: str) -> str:
    """Extract visible text from an RTF document."""
    out: list[str] = []
    stack: list[bool] = []
    skip = False
    drop_fallback = False

    for match in _TOKEN_RE.finditer(rtf):
        word, arg, hexcode, symbol, brace, text = match.groups()

        if brace == "{":
            stack.append(skip)
            continue
        if brace == "}":
            skip = stack.pop() if stack else False
            continue

        if word:
            if word in _DESTINATIONS:
                skip = True
            elif skip:
                pass
            elif word == "u" and arg:
                out.append(chr(int(arg) % 65536))
                drop_fallback = True
                continue
            elif word in _SPECIAL_WORDS:
                out.append(_SPECIAL_WORDS[word])
            drop_fallback = False
            continue

        if symbol:
            if symbol == "*":
                skip = True
            elif not skip:
                if symbol in "\\{}":
                    out.append(symbol)
                elif symbol == "~":
                    out.append(" ")
                elif symbol in "\r\n":
                    out.append("\n")
            drop_fallback = False
            continue

        if hexcode:
            if not skip and not drop_fallback:
                out.append(bytes.fromhex(hexcode).decode("cp1252", errors="replace"))
            drop_fallback = False
            continue

        if text and not skip:
            # Raw line breaks carry no meaning in RTF
            text = text.replace("\r", "").replace("\n", "")
            if drop_fallback:
                text = text[1:]
            out.append(text)
        drop_fallback = False

    # Spaces left behind by control words, but not code indentation
    return re.sub(r"(?m)^ {1,3}(?! )", "", "".join(out))


class RTFConverter(BaseConverter):
    """Convert RTF files to Markdown via plain text."""

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [".rtf"]

    def convert(self, file_path: Path) -> ConversionResult:
        try:
            rtf = self._read_text(file_path)
        except (OSError, UnicodeDecodeError) as e:
            return self._create_error_result(file_path, str(e))

        try:
            text = rtf_to_text(rtf)
        except (ValueError, IndexError) as e:
            return self._create_error_result(file_path, f"Invalid RTF: {e}")

        return self._create_success_result(file_path, text_to_markdown(text))
