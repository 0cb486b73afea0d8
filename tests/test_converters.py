"""Tests for the format converters."""

import json
from unittest.mock import MagicMock, patch

import pytest

from docconverter.config import ConversionOptions
from docconverter.converters import (
    DOCXConverter,
    HTMLConverter,
    JSONConverter,
    MarkdownConverter,
    PlainTextConverter,
    RTFConverter,
    get_converter,
    get_supported_extensions,
    is_binary_extension,
)
from docconverter.converters.html import strip_html
from docconverter.converters.json import json_to_markdown
from docconverter.converters.markdown import has_frontmatter
from docconverter.converters.rtf import rtf_to_text
from docconverter.converters.text import text_to_markdown


class TestRegistry:
    def test_lookup(self):
        assert get_converter(".DOCX") is DOCXConverter
        assert get_converter(".htm") is HTMLConverter
        assert get_converter(".py") is PlainTextConverter
        assert get_converter(".mdx") is MarkdownConverter
        assert get_converter(".png") is None

    def test_binary(self):
        assert is_binary_extension(".PNG")
        assert not is_binary_extension(".md")

    def test_supported_extensions(self):
        extensions = get_supported_extensions()
        assert ".md" in extensions
        assert ".json" in extensions
        assert ".png" not in extensions


class TestTextToMarkdown:
    def test_label_becomes_heading(self):
        assert text_to_markdown("Label:\n\nSome prose") == "## Label\n\nSome prose"

    def test_trailing_label_left_alone(self):
        assert text_to_markdown("Text first\nEnding:") == "Text first\nEnding:"

    def test_indented_block_fenced(self):
        text = "Run this:\n\n    pip install x\n    x --help\n\nDone."
        assert text_to_markdown(text) == "## Run this\n\n```\npip install x\nx --help\n```\n\nDone."

    def test_blank_line_inside_code_kept(self):
        text = "\tone\n\n\ttwo\nafter"
        assert text_to_markdown(text) == "```\none\n\ntwo\n```\nafter"

    def test_bullets_normalized(self):
        assert text_to_markdown("• one\n* two\n  - three") == "- one\n- two\n  - three"

    def test_empty(self):
        assert text_to_markdown("") == ""


class TestPlainTextConverter:
    def test_convert(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Summary:\n\nAll good.", encoding="utf-8")

        result = PlainTextConverter().convert(path)

        assert result.success is True
        assert result.markdown == "## Summary\n\nAll good."
        assert result.needs_frontmatter is True

    def test_decode_error(self, tmp_path):
        path = tmp_path / "latin.txt"
        path.write_bytes(b"caf\xe9")

        result = PlainTextConverter().convert(path)

        assert result.success is False
        assert result.error


class TestRTF:
    def test_paragraphs_and_destinations(self):
        rtf = r"{\rtf1\ansi{\fonttbl{\f0 Arial;}}\f0 Hello\par World\par}"
        assert rtf_to_text(rtf) == "Hello\nWorld\n"

    def test_hex_escape(self):
        assert rtf_to_text(r"{\rtf1 caf\'e9}") == "café"

    def test_unicode_escape_drops_fallback(self):
        assert rtf_to_text("{\\rtf1 \\u" + "8364?5}") == "\N{EURO SIGN}5"

    def test_ignorable_destination(self):
        assert rtf_to_text(r"{\rtf1 {\*\generator Writer;}Text}") == "Text"

    def test_escaped_braces(self):
        assert rtf_to_text(r"{\rtf1 a \{b\}}") == "a {b}"

    def test_converter_applies_text_rules(self, tmp_path):
        path = tmp_path / "doc.rtf"
        path.write_text(r"{\rtf1\ansi Steps:\par\par first\par}", encoding="utf-8")

        result = RTFConverter().convert(path)

        assert result.success is True
        assert result.markdown == "## Steps\n\nfirst"


class TestJSON:
    def test_api_spec(self):
        data = {
            "openapi": "3.0.0",
            "info": {"title": "Pets API", "version": "2.1.0"},
            "paths": {"/pets": {"get": {"summary": "List pets"}}},
        }
        markdown = json_to_markdown(data, "api.json")

        assert markdown.startswith("# Pets API")
        assert "**Version:** 2.1.0" in markdown
        assert "### `/pets`" in markdown
        assert "#### GET" in markdown
        assert "List pets" in markdown

    def test_config_file(self):
        data = {"name": "site", "version": "1.0.0", "scripts": {"build": "astro build"}}
        markdown = json_to_markdown(data, "package.json")

        assert markdown.startswith("# site")
        assert "## Scripts" in markdown
        assert '- **build**: "astro build"' in markdown

    def test_schema(self):
        data = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "User",
            "type": "object",
            "properties": {"email": {"type": "string", "description": "Contact address"}},
        }
        markdown = json_to_markdown(data, "user.schema.json")

        assert markdown.startswith("# User")
        assert "### `email`" in markdown
        assert "Contact address" in markdown

    def test_generic_flat_object(self):
        markdown = json_to_markdown({"enabled": True, "count": 3, "label": "a|b"}, "flags.json")

        assert markdown.startswith("# Flags")
        assert "| enabled | boolean | true |" in markdown
        assert "| count | number | 3 |" in markdown
        assert "| label | string | a\\|b |" in markdown

    def test_generic_list(self):
        markdown = json_to_markdown([1, 2], "numbers.json")
        assert "```json" in markdown
        assert "## Properties" not in markdown

    def test_converter(self, tmp_path):
        path = tmp_path / "flags.json"
        path.write_text(json.dumps({"a": 1}), encoding="utf-8")

        result = JSONConverter().convert(path)

        assert result.success is True
        assert "| a | number | 1 |" in result.markdown

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        result = JSONConverter().convert(path)

        assert result.success is False
        assert result.error.startswith("Failed to process JSON")


class TestHTML:
    def test_convert(self, tmp_path):
        path = tmp_path / "page.html"
        path.write_text(
            "<html><head><title>My Page</title><style>p{}</style></head>"
            "<body><h1>Heading</h1><p>Hello <b>world</b></p><ul><li>One</li></ul>"
            "<script>alert(1)</script></body></html>",
            encoding="utf-8",
        )

        result = HTMLConverter().convert(path)

        assert result.success is True
        assert result.title_hint == "My Page"
        assert "# Heading" in result.markdown
        assert "Hello **world**" in result.markdown
        assert "- One" in result.markdown
        assert "alert" not in result.markdown

    def test_fallback_on_conversion_failure(self, tmp_path):
        path = tmp_path / "page.html"
        path.write_text("<title>T</title><h2>Sub</h2><p>Text &amp; more</p>", encoding="utf-8")

        with patch("markdownify.markdownify", side_effect=RuntimeError("boom")):
            result = HTMLConverter().convert(path)

        assert result.success is True
        assert result.title_hint == "T"
        assert "## Sub" in result.markdown
        assert "Text & more" in result.markdown

    def test_strip_html(self):
        text = strip_html("<head><title>x</title></head><h1>A</h1><p>B</p><ul><li>C</li></ul>")
        assert text == "# A\n\nB\n\n- C"


class TestDOCX:
    def test_convert_via_html(self, tmp_path):
        path = tmp_path / "report.docx"
        path.write_bytes(b"fake")

        mammoth_result = MagicMock()
        mammoth_result.value = "<h1>Report</h1><p>Body text</p>"
        mammoth_result.messages = ["Unrecognised style"]

        with patch("mammoth.convert_to_html", return_value=mammoth_result):
            result = DOCXConverter().convert(path)

        assert result.success is True
        assert "# Report" in result.markdown
        assert "Body text" in result.markdown

    def test_mammoth_failure(self, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"fake")

        with patch("mammoth.convert_to_html", side_effect=ValueError("not a zip")):
            result = DOCXConverter().convert(path)

        assert result.success is False
        assert "not a zip" in result.error

    def test_image_handler_writes_assets(self, tmp_path):
        path = tmp_path / "pics.docx"
        path.write_bytes(b"fake")
        options = ConversionOptions(output_dir=tmp_path / "site" / "docs", process_images=True)

        image = MagicMock()
        image.content_type = "image/jpeg"
        image.open.return_value.__enter__.return_value.read.return_value = b"jpg-bytes"

        def fake_convert(docx_file, convert_image):
            mammoth_result = MagicMock()
            mammoth_result.value = "<p>Pic</p>"
            mammoth_result.messages = []
            return mammoth_result

        handlers = []
        with patch("mammoth.convert_to_html", side_effect=fake_convert), patch(
            "mammoth.images.img_element", side_effect=lambda fn: handlers.append(fn) or fn
        ):
            result = DOCXConverter(options).convert(path)

        assert result.success is True
        attributes = handlers[0](image)
        assert attributes == {"src": "../assets/pics-image-1.jpg"}
        assert (tmp_path / "site" / "assets" / "pics-image-1.jpg").read_bytes() == b"jpg-bytes"


class TestMarkdown:
    @pytest.mark.parametrize(
        "content, expected",
        [
            ("---\ntitle: Hi\n---\nBody", True),
            ("---\ntitle: ''\n---\nBody", False),
            ("---\n---\nBody", False),
            ("# No block", False),
            ("---\ntitle: [broken\n---\n", True),
        ],
    )
    def test_has_frontmatter(self, content, expected):
        assert has_frontmatter(content) is expected

    def test_passthrough(self, tmp_path):
        path = tmp_path / "page.mdx"
        content = "---\ntitle: Hi\n---\n\n<Card />\n"
        path.write_text(content, encoding="utf-8")

        result = MarkdownConverter().convert(path)

        assert result.markdown == content
        assert result.needs_frontmatter is False
