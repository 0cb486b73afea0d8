"""HTML to Markdown converter using markdownify and BeautifulSoup."""

import html
import logging
import re
from pathlib import Path

from docconverter.converters.base import BaseConverter, ConversionResult

log = logging.getLogger(__name__)


class HTMLConverter(BaseConverter):
    """Convert HTML files to Markdown using markdownify."""

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return [".html", ".htm"]

    def convert(self, file_path: Path) -> ConversionResult:
        """Convert an HTML file to Markdown.

        Args:
            file_path: Path to the HTML file.

        Returns:
            ConversionResult with the conversion outcome.
        """
        try:
            html_content = self._read_text(file_path)
        except (OSError, UnicodeDecodeError) as e:
            return self._create_error_result(file_path, str(e))

        return self.html_to_markdown(html_content, file_path)

    def html_to_markdown(self, html_content: str, source_path: Path) -> ConversionResult:
        """Convert an HTML string to Markdown.

        Falls back to a tag stripper when parsing or conversion fails.

        Args:
            html_content: Raw HTML string.
            source_path: Source identifier for the result.

        Returns:
            ConversionResult with the conversion outcome.
        """
        try:
            from bs4 import BeautifulSoup
            from markdownify import markdownify as md
        except ImportError as e:
            return self._create_error_result(
                source_path,
                f"Required package not installed: {e}. Run: pip install markdownify beautifulsoup4",
            )

        title_hint = None
        try:
            soup = BeautifulSoup(html_content, "html.parser")

            if soup.title and soup.title.string:
                title_hint = soup.title.string.strip() or None

            for element in soup(["script", "style", "noscript"]):
                element.decompose()

            # Get the body content if present, otherwise use whole document
            body = soup.body if soup.body else soup
            if body is soup and soup.head:
                soup.head.decompose()

            markdown = md(
                str(body),
                heading_style="atx",
                bullets="-",
                code_language="",
                strip=["script", "style"],
            )
        except Exception as e:
            log.warning("HTML conversion failed for %s, using tag stripper: %s", source_path, e)
            title_hint = title_hint or _title_from_raw(html_content)
            markdown = strip_html(html_content)

        return self._create_success_result(
            source_path,
            self._clean_markdown(markdown),
            title_hint=title_hint,
        )


def _title_from_raw(html_content: str) -> str | None:
    match = re.search(r"<title[^>]*>(.*?)</title>", html_content, re.I | re.S)
    if match and match.group(1).strip():
        return html.unescape(match.group(1).strip())
    return None


def strip_html(html_content: str) -> str:
    """Crude HTML to Markdown: headings and paragraphs only."""
    text = re.sub(r"<(script|style|noscript|head)\b.*?</\1>", "", html_content, flags=re.I | re.S)

    def heading(match: re.Match) -> str:
        level = int(match.group(1))
        inner = re.sub(r"<[^>]+>", "", match.group(2)).strip()
        return f"\n\n{'#' * level} {inner}\n\n"

    text = re.sub(r"<h([1-6])[^>]*>(.*?)</h\1>", heading, text, flags=re.I | re.S)
    text = re.sub(r"</?(p|div|section|article|br)\b[^>]*>", "\n\n", text, flags=re.I)
    text = re.sub(r"<li[^>]*>", "\n- ", text, flags=re.I)
    text = re.sub(r"<[^>]+>", "", text)
    text = html.unescape(text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()
