"""Tests for link repair and image copying."""

from pathlib import Path

import pytest

from docconverter.plugins.builtin.links import LinkImageProcessor
from docconverter.utils.url_utils import is_external, split_fragment, strip_title


@pytest.fixture
def site(tmp_path):
    docs = tmp_path / "src" / "docs"
    (docs / "sub").mkdir(parents=True)
    (docs / "img").mkdir()
    (docs / "guide.md").write_text("# Guide")
    (docs / "sub" / "index.md").write_text("# Sub")
    (docs / "img" / "pic.png").write_bytes(b"png")
    source = docs / "a.md"
    source.write_text("# A")
    return tmp_path, docs, source


def make_processor(tmp_path, docs, **kwargs):
    return LinkImageProcessor(base_dir=docs, output_dir=tmp_path / "out" / "docs", **kwargs)


class TestUrlUtils:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("https://example.com", True),
            ("mailto:me@example.com", True),
            ("//cdn.example.com/x.js", True),
            ("guide.md", False),
            ("C:/docs/a.md", False),
        ],
    )
    def test_is_external(self, value, expected):
        assert is_external(value) is expected

    def test_split_fragment(self):
        assert split_fragment("a.md#top") == ("a.md", "#top")
        assert split_fragment("a.md") == ("a.md", "")

    def test_strip_title(self):
        assert strip_title('a.md "Title"') == ("a.md", ' "Title"')
        assert strip_title("a.md") == ("a.md", "")


class TestLinks:
    def test_rewrites_markdown_link(self, site):
        tmp_path, docs, source = site
        processor = make_processor(tmp_path, docs, process_images=False)

        result = processor.process("See [Guide](guide.md).", source)

        assert result.content == "See [Guide](./guide)."
        assert result.link_report().repaired == 1

    def test_keeps_fragment(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process("[G](guide.md#setup)", source)
        assert result.content == "[G](./guide#setup)"

    def test_extensionless_link(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process("[G](guide)", source)
        assert result.content == "[G](./guide)"

    def test_directory_index(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process("[S](sub/)", source)
        assert result.content == "[S](./sub)"

    def test_root_relative(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process("[S](/sub/index.md)", source)
        assert result.content == "[S](./sub)"

    def test_broken_link_left_alone(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process("[X](missing.md)", source)

        assert result.content == "[X](missing.md)"
        report = result.link_report()
        assert report.broken == 1
        assert report.repaired == 0

    def test_external_and_anchor_untouched(self, site):
        tmp_path, docs, source = site
        content = "[Site](https://example.com) and [Top](#top)"
        result = make_processor(tmp_path, docs).process(content, source)

        assert result.content == content
        assert result.link_report().external == 2

    def test_title_preserved(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process('[G](guide.md "Read me")', source)
        assert result.content == '[G](./guide "Read me")'

    def test_disabled(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs, fix_links=False).process("[G](guide.md)", source)
        assert result.content == "[G](guide.md)"

    def test_root_link_from_cwd_relative_source(self, site, monkeypatch):
        tmp_path, docs, _ = site
        monkeypatch.chdir(docs)
        processor = LinkImageProcessor(base_dir=Path("."), output_dir=tmp_path / "out" / "docs")

        result = processor.process("[home](/) [here](./) [G](guide.md)", Path("a.md"))

        assert result.content == "[home](/) [here](./) [G](./guide)"
        assert result.link_report().repaired == 1


class TestImages:
    def test_copies_and_rewrites(self, site):
        tmp_path, docs, source = site
        target = tmp_path / "out" / "docs" / "a.md"

        result = make_processor(tmp_path, docs).process("![Alt](img/pic.png)", source, target)

        assert result.content == "![Alt](../assets/pic.png)"
        assert (tmp_path / "out" / "assets" / "pic.png").read_bytes() == b"png"
        assert result.image_report().copied == 1

    def test_empty_alt_uses_stem(self, site):
        tmp_path, docs, source = site
        target = tmp_path / "out" / "docs" / "a.md"
        result = make_processor(tmp_path, docs).process("![](img/pic.png)", source, target)
        assert result.content == "![pic](../assets/pic.png)"

    def test_dry_run_does_not_copy(self, site):
        tmp_path, docs, source = site
        target = tmp_path / "out" / "docs" / "a.md"

        result = make_processor(tmp_path, docs, dry_run=True).process("![Alt](img/pic.png)", source, target)

        assert result.content == "![Alt](../assets/pic.png)"
        assert not (tmp_path / "out" / "assets").exists()
        assert result.image_report().copied == 0

    def test_missing_image(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs).process("![Alt](img/none.png)", source)

        assert result.content == "![Alt](img/none.png)"
        assert result.image_report().missing == 1

    def test_external_image(self, site):
        tmp_path, docs, source = site
        content = "![Logo](https://example.com/logo.png)"
        result = make_processor(tmp_path, docs).process(content, source)

        assert result.content == content
        assert result.image_report().external == 1

    def test_image_not_treated_as_link(self, site):
        tmp_path, docs, source = site
        result = make_processor(tmp_path, docs, process_images=False).process("![G](guide.md)", source)
        assert result.content == "![G](guide.md)"
        assert result.links == []

    def test_same_name_from_other_folder_not_overwritten(self, site):
        tmp_path, docs, source = site
        (docs / "other").mkdir()
        (docs / "other" / "pic.png").write_bytes(b"other")
        target = tmp_path / "out" / "docs" / "a.md"

        result = make_processor(tmp_path, docs).process("![A](img/pic.png) ![B](other/pic.png)", source, target)

        assets = tmp_path / "out" / "assets"
        assert sorted(p.read_bytes() for p in assets.iterdir()) == [b"other", b"png"]
        assert result.content.startswith("![A](../assets/pic.png) ![B](../assets/pic-")
        assert result.image_report().copied == 2

    def test_same_image_reuses_asset(self, site):
        tmp_path, docs, source = site
        target = tmp_path / "out" / "docs" / "a.md"

        result = make_processor(tmp_path, docs).process("![A](img/pic.png) ![B](img/pic.png)", source, target)

        assert result.content == "![A](../assets/pic.png) ![B](../assets/pic.png)"
        assert [p.name for p in (tmp_path / "out" / "assets").iterdir()] == ["pic.png"]
