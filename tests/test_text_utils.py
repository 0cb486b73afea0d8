"""Tests for the text helpers."""

from docconverter.utils.text_utils import (
    contains_keyword,
    count_code_blocks,
    humanize_filename,
    iter_headings,
    slugify,
    strip_frontmatter,
)


class TestSlugify:
    def test_basic(self):
        assert slugify("Getting Started") == "getting-started"

    def test_punctuation_removed(self):
        assert slugify("What's new in v2.0?") == "whats-new-in-v20"

    def test_hyphens_collapsed_and_trimmed(self):
        assert slugify("  -- A  --  B --  ") == "a-b"


class TestHumanizeFilename:
    def test_separators(self):
        assert humanize_filename("getting-started_guide.md") == "Getting Started Guide"

    def test_camel_case(self):
        assert humanize_filename("apiReference.txt") == "Api Reference"

    def test_no_extension(self):
        assert humanize_filename("changelog") == "Changelog"


class TestStripFrontmatter:
    def test_removes_block(self):
        assert strip_frontmatter("---\ntitle: x\n---\nBody") == "Body"

    def test_leaves_content_without_block(self):
        assert strip_frontmatter("Body\n---\n") == "Body\n---\n"


class TestIterHeadings:
    def test_levels_and_lines(self):
        content = "# One\n\ntext\n\n## Two ##\n"
        assert iter_headings(content) == [(1, "One", 1), (2, "Two", 5)]

    def test_ignores_fenced_code(self):
        content = "# Real\n\n```bash\n# comment\n```\n\n## Also real"
        assert [text for _, text, _ in iter_headings(content)] == ["Real", "Also real"]

    def test_requires_space_after_hashes(self):
        assert iter_headings("#hashtag") == []


class TestKeywords:
    def test_word_boundary(self):
        assert contains_keyword("we use js daily", "js")
        assert not contains_keyword("json files", "js")

    def test_leading_punctuation_keyword(self):
        assert contains_keyword("open app.ts now", ".ts")

    def test_case_insensitive(self):
        assert contains_keyword("Python rocks", "python")


class TestCountCodeBlocks:
    def test_pairs(self):
        assert count_code_blocks("```\na\n```\n```py\nb\n```") == 2

    def test_none(self):
        assert count_code_blocks("plain") == 0
