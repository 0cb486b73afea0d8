"""End-to-end tests for DocumentConverter."""

import pytest

from docconverter.config import ConversionOptions
from docconverter.converter import DocumentConverter
from docconverter.frontmatter import split_frontmatter
from docconverter.plugins.registry import PluginRegistry

ALERT_DOC = "---\ntitle: Alert Demo\ndescription: Shows a note.\n---\n\n> [!NOTE]\n> Hello\n"


@pytest.fixture
def notes(tmp_path):
    directory = tmp_path / "notes"
    directory.mkdir()
    return directory


@pytest.fixture
def out_dir(tmp_path):
    return tmp_path / "out"


def make_converter(out_dir, **kwargs):
    return DocumentConverter(ConversionOptions(output_dir=out_dir, **kwargs))


class TestConvertFile:
    def test_plain_text(self, notes, out_dir):
        source = notes / "hello.txt"
        source.write_text("Summary:\n\nEverything works as expected here.", encoding="utf-8")

        result = make_converter(out_dir).convert_file(source)

        assert result.success is True
        assert result.output_path == out_dir / "hello.md"
        written = result.output_path.read_text(encoding="utf-8")
        assert written == result.markdown
        data, body = split_frontmatter(written)
        assert data["title"] == "Summary"
        assert data["description"] == "Everything works as expected here."
        assert body.strip() == "## Summary\n\nEverything works as expected here."

    def test_explicit_output_path(self, notes, tmp_path, out_dir):
        source = notes / "hello.txt"
        source.write_text("Text here.", encoding="utf-8")
        target = tmp_path / "elsewhere" / "custom.md"

        result = make_converter(out_dir).convert_file(source, target)

        assert result.output_path == target
        assert target.exists()

    def test_markdown_frontmatter_kept(self, notes, out_dir):
        source = notes / "intro.md"
        source.write_text("---\ntitle: Mine\nsidebar:\n  order: 2\n---\n\n# Heading\n\nBody.\n", encoding="utf-8")

        result = make_converter(out_dir).convert_file(source)

        data, body = split_frontmatter(result.markdown)
        assert data == {"title": "Mine", "sidebar": {"order": 2}}
        assert body.strip() == "# Heading\n\nBody."

    def test_markdown_without_frontmatter_synthesized(self, notes, out_dir):
        source = notes / "intro.md"
        source.write_text("# Real Title\n\nBody paragraph that is long enough.\n", encoding="utf-8")

        result = make_converter(out_dir).convert_file(source)

        data, _ = split_frontmatter(result.markdown)
        assert data["title"] == "Real Title"
        assert data["description"] == "Body paragraph that is long enough."

    def test_unreadable_frontmatter_replaced(self, notes, out_dir, caplog):
        source = notes / "intro.md"
        source.write_text("---\ntitle: [oops\n---\n# Real Title\n\nBody paragraph that is long enough.\n")

        result = make_converter(out_dir).convert_file(source)

        assert result.success is True
        data, body = split_frontmatter(result.markdown)
        assert data["title"] == "Real Title"
        assert "oops" not in body
        assert "Discarding unreadable front matter" in caplog.text

    def test_mdx_mode_alert(self, notes, out_dir):
        source = notes / "alert.md"
        source.write_text(ALERT_DOC, encoding="utf-8")

        result = make_converter(out_dir, mdx_mode=True).convert_file(source)

        assert result.output_path == out_dir / "alert.mdx"
        written = result.output_path.read_text(encoding="utf-8")
        assert written.startswith('---\ntitle: "Alert Demo"\n')
        assert written.count("import { Aside } from '@astrojs/starlight/components';") == 1
        assert '<Aside type="note">\nHello\n</Aside>' in written
        assert "[!NOTE]" not in written

    def test_alert_untouched_without_mdx_mode(self, notes, out_dir):
        source = notes / "alert.md"
        source.write_text(ALERT_DOC, encoding="utf-8")

        result = make_converter(out_dir).convert_file(source)

        assert result.output_path.suffix == ".md"
        assert "> [!NOTE]" in result.markdown
        assert "import" not in result.markdown

    def test_empty_registry_runs_no_plugins(self, notes, out_dir):
        source = notes / "alert.md"
        source.write_text(ALERT_DOC, encoding="utf-8")
        converter = DocumentConverter(ConversionOptions(output_dir=out_dir, mdx_mode=True), PluginRegistry())

        result = converter.convert_file(source)

        assert "> [!NOTE]" in result.markdown
        assert result.metadata.word_count is None

    def test_enhanced_metadata_on_result_only(self, notes, out_dir):
        source = notes / "alert.md"
        source.write_text(ALERT_DOC, encoding="utf-8")

        result = make_converter(out_dir, mdx_mode=True).convert_file(source)

        assert result.metadata.reading_time == 1
        assert "wordCount" not in result.markdown

    def test_links_and_toc_for_cwd_relative_input(self, notes, out_dir, monkeypatch, caplog):
        monkeypatch.chdir(notes)
        (notes / "other.md").write_text("# Other", encoding="utf-8")
        (notes / "page.md").write_text(
            "# Page\n\n[home](/) and [other](other.md)\n\n## One\n\nText.\n\n## Two\n\nText.\n",
            encoding="utf-8",
        )

        result = make_converter(out_dir, fix_links=True, generate_toc=True).convert_file("page.md")

        assert result.success is True
        assert "## Table of Contents" in result.markdown
        assert "[other](./other)" in result.markdown
        assert "failed" not in caplog.text

    def test_binary_skipped(self, notes, out_dir):
        source = notes / "logo.png"
        source.write_bytes(b"\x89PNG")
        converter = make_converter(out_dir)

        result = converter.convert_file(source)

        assert result.skipped is True
        assert result.success is False
        assert result.error_message == "Skipped: binary file"
        assert not out_dir.exists()
        assert converter.get_stats().skipped == 1

    def test_ignored_file_skipped(self, notes, out_dir):
        source = notes / "dist" / "bundle.md"
        source.parent.mkdir()
        source.write_text("# Built")

        result = make_converter(out_dir).convert_file(source)

        assert result.skipped is True
        assert result.error_message == "Skipped: ignored"

    def test_decode_error(self, notes, out_dir):
        source = notes / "latin.txt"
        source.write_bytes(b"caf\xe9")
        converter = make_converter(out_dir)

        result = converter.convert_file(source)

        assert result.success is False
        assert result.error.startswith(f"Error processing {source}: ")
        assert not (out_dir / "latin.md").exists()
        assert converter.get_stats().errors == 1

    def test_dry_run_writes_nothing(self, notes, out_dir):
        source = notes / "hello.txt"
        source.write_text("Some content for the page.", encoding="utf-8")
        converter = make_converter(out_dir, dry_run=True)

        result = converter.convert_file(source)

        assert result.success is True
        assert result.output_path == out_dir / "hello.md"
        assert result.markdown.startswith("---\n")
        assert not out_dir.exists()
        assert converter.format_stats().endswith("Dry run completed - no files were written.")

    def test_repair_mode_cleans_frontmatter(self, notes, out_dir):
        source = notes / "broken.md"
        source.write_text(
            "---\ntitle: '{Bad} [Title]'\ndescription: Fine description for the page.\n---\n# Body\n\ntext",
            encoding="utf-8",
        )

        repaired = make_converter(out_dir, repair_mode=True).convert_file(source)
        untouched = make_converter(out_dir).convert_file(source)

        assert split_frontmatter(repaired.markdown)[0]["title"] == "Bad Title"
        assert split_frontmatter(repaired.markdown)[0]["category"] == "Notes"
        assert split_frontmatter(untouched.markdown)[0]["title"] == "{Bad} [Title]"

    def test_validate_content_reports(self, notes, out_dir):
        source = notes / "hello.txt"
        source.write_text("Short.", encoding="utf-8")

        result = make_converter(out_dir, validate_content=True).convert_file(source)

        assert [r.validator for r in result.quality_reports] == [
            "content-quality-validator",
            "frontmatter-validator",
        ]
        assert all(0 <= r.score <= 100 for r in result.quality_reports)

    def test_no_reports_without_validation(self, notes, out_dir):
        source = notes / "hello.txt"
        source.write_text("Short.", encoding="utf-8")

        assert make_converter(out_dir).convert_file(source).quality_reports == []


class TestConvertDirectory:
    @pytest.fixture
    def site(self, tmp_path):
        root = tmp_path / "site"
        (root / "sub").mkdir(parents=True)
        (root / "node_modules").mkdir()
        (root / "index.md").write_text("# Home\n\nWelcome to the home page of the site.\n")
        (root / "logo.png").write_bytes(b"\x89PNG")
        (root / "sub" / "page.txt").write_text("Nested page content goes here.")
        (root / "node_modules" / "dep.md").write_text("# Dependency")
        return root

    def test_preserves_structure(self, site, out_dir):
        converter = make_converter(out_dir)

        results = converter.convert_directory(site)

        assert [r.input_path.name for r in results] == ["index.md", "logo.png", "page.txt"]
        assert (out_dir / "index.md").exists()
        assert (out_dir / "sub" / "page.md").exists()
        assert not (out_dir / "node_modules").exists()
        stats = converter.get_stats()
        assert (stats.processed, stats.skipped, stats.errors) == (2, 1, 0)

    def test_flat(self, site, out_dir):
        make_converter(out_dir, preserve_structure=False).convert_directory(site)

        assert (out_dir / "page.md").exists()
        assert not (out_dir / "sub").exists()

    def test_explicit_output_dir(self, site, tmp_path, out_dir):
        target = tmp_path / "other"
        make_converter(out_dir).convert_directory(site, target)

        assert (target / "sub" / "page.md").exists()
        assert not out_dir.exists()

    def test_missing_directory(self, tmp_path, out_dir, caplog):
        results = make_converter(out_dir).convert_directory(tmp_path / "nope")

        assert results == []
        assert "Error processing directory" in caplog.text

    def test_category_from_relative_path(self, tmp_path, out_dir):
        root = tmp_path / "site"
        (root / "guides").mkdir(parents=True)
        (root / "guides" / "start.txt").write_text("Some words about starting out.")

        results = make_converter(out_dir).convert_directory(root)

        assert split_frontmatter(results[0].markdown)[0]["category"] == "Guides"


class TestStats:
    def test_counts_and_formats(self, notes, out_dir):
        (notes / "a.txt").write_text("Alpha text.")
        (notes / "b.txt").write_text("Beta text.")
        (notes / "c.md").write_text("# C")
        converter = make_converter(out_dir)

        for name in ("a.txt", "b.txt", "c.md"):
            converter.convert_file(notes / name)

        assert converter.get_stats().as_dict() == {
            "processed": 3,
            "skipped": 0,
            "errors": 0,
            "formats": {".txt": 2, ".md": 1},
        }
        assert converter.format_stats() == (
            "Conversion statistics:\n"
            "  Processed: 3 files\n"
            "  Skipped: 0 files\n"
            "  Errors: 0 files\n"
            "File formats processed:\n"
            "  .md: 1 files\n"
            "  .txt: 2 files"
        )

    def test_get_stats_returns_copy(self, notes, out_dir):
        (notes / "a.txt").write_text("Alpha text.")
        converter = make_converter(out_dir)
        converter.convert_file(notes / "a.txt")

        snapshot = converter.get_stats()
        snapshot.processed = 99
        snapshot.formats[".txt"] = 99

        assert converter.get_stats().processed == 1
        assert converter.get_stats().formats[".txt"] == 1
