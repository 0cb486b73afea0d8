"""Table of contents generation."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from docconverter.utils.text_utils import FRONTMATTER_BLOCK_RE, iter_headings, slugify

TOC_HEADING = "## Table of Contents"

_EXISTING_TOC_PATTERNS = [
    re.compile(r"^##?\s+table\s+of\s+contents", re.I | re.M),
    re.compile(r"^##?\s+contents\b", re.I | re.M),
    re.compile(r"^##?\s+toc\b", re.I | re.M),
    re.compile(r"<nav[^>]*table-of-contents", re.I),
]
_MARKDOWN_TOC_RE = re.compile(
    r"^##?\s+(?:table\s+of\s+contents|contents|toc)\s*\n(?:[ \t]*\n)?(?:[ \t]*-\s+\[.*?\]\(.*?\)[ \t]*\n?)*",
    re.I | re.M,
)
_HTML_TOC_RE = re.compile(r"<nav[^>]*table-of-contents[^>]*>[\s\S]*?</nav>", re.I)


@dataclass
class TocEntry:
    level: int
    title: str
    anchor: str
    children: list["TocEntry"] = field(default_factory=list)


def clean_heading_text(text: str) -> str:
    text = re.sub(r"\*\*(.*?)\*\*", r"\1", text)
    text = re.sub(r"\*(.*?)\*", r"\1", text)
    text = re.sub(r"`(.*?)`", r"\1", text)
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)
    return text.strip()


def _split_frontmatter_block(content: str) -> tuple[str, str]:
    match = FRONTMATTER_BLOCK_RE.match(content)
    if not match:
        return "", content
    return content[: match.end()], content[match.end():]


class TocGenerator:
    """Build a nested table of contents from markdown headings.

    Headings deeper than ``max_depth`` are ignored, and nothing is produced
    for documents with fewer than ``min_entries`` headings.
    """

    def __init__(self, max_depth: int = 4, min_entries: int = 2):
        self.max_depth = max_depth
        self.min_entries = min_entries

    def extract_headings(
        self, content: str, anchor: Callable[[str], str] | None = None
    ) -> list[TocEntry]:
        """Flat heading list with anchors unique within the document."""
        _, body = _split_frontmatter_block(content)
        make_anchor = anchor or slugify
        seen: dict[str, int] = {}
        entries = []

        for level, text, _ in iter_headings(body):
            if level > self.max_depth:
                continue
            title = clean_heading_text(text)
            base = make_anchor(title)
            count = seen.get(base, 0)
            seen[base] = count + 1
            entries.append(TocEntry(level, title, base if count == 0 else f"{base}-{count}"))

        return entries

    def generate(self, content: str, anchor: Callable[[str], str] | None = None) -> list[TocEntry]:
        """Return the heading tree, or [] below the minimum entry count."""
        headings = self.extract_headings(content, anchor)
        if len(headings) < self.min_entries:
            return []
        return self._build_tree(headings)

    @staticmethod
    def _build_tree(headings: list[TocEntry]) -> list[TocEntry]:
        root: list[TocEntry] = []
        stack: list[TocEntry] = []

        for heading in headings:
            entry = TocEntry(heading.level, heading.title, heading.anchor)
            while stack and stack[-1].level >= entry.level:
                stack.pop()

            if stack:
                stack[-1].children.append(entry)
            else:
                root.append(entry)
            stack.append(entry)

        return root

    def render_markdown(self, toc: list[TocEntry]) -> str:
        lines = [TOC_HEADING, ""]

        def walk(entries: list[TocEntry], depth: int) -> None:
            for entry in entries:
                lines.append(f"{'  ' * depth}- [{entry.title}](#{entry.anchor})")
                walk(entry.children, depth + 1)

        walk(toc, 0)
        return "\n".join(lines) + "\n"

    def render_html(self, toc: list[TocEntry]) -> str:
        lines = ['<nav class="table-of-contents">', "<h2>Table of Contents</h2>", "<ul>"]

        def walk(entries: list[TocEntry], depth: int) -> None:
            indent = "  " * depth
            for entry in entries:
                lines.append(f'{indent}<li><a href="#{entry.anchor}">{entry.title}</a>')
                if entry.children:
                    lines.append(f"{indent}  <ul>")
                    walk(entry.children, depth + 1)
                    lines.append(f"{indent}  </ul>")
                lines.append(f"{indent}</li>")

        walk(toc, 1)
        lines += ["</ul>", "</nav>"]
        return "\n".join(lines)

    def render_sidebar(self, toc: list[TocEntry], base_url: str = "") -> list[dict]:
        """Sidebar navigation items: {'label', 'link', 'items'?}."""
        items = []
        for entry in toc:
            item = {"label": entry.title, "link": f"{base_url}#{entry.anchor}"}
            if entry.children:
                item["items"] = self.render_sidebar(entry.children, base_url)
            items.append(item)
        return items

    def insert(self, content: str, position: str = "after-title", marker: str | None = None) -> str:
        """Insert a rendered TOC into content.

        Args:
            content: Markdown, optionally with front matter.
            position: 'top', 'after-title' or 'custom'.
            marker: Text replaced by the TOC when position is 'custom'.

        Returns:
            Content with the TOC, or unchanged when there are too few headings.
        """
        toc = self.generate(content)
        if not toc:
            return content

        rendered = self.render_markdown(toc)
        if position == "custom" and marker and marker in content:
            return content.replace(marker, rendered, 1)

        frontmatter, body = _split_frontmatter_block(content)
        if position == "top":
            return self._join(frontmatter, rendered + "\n" + body.strip())

        first = self._first_heading_end(body)
        if first is None:
            return self._join(frontmatter, rendered + "\n" + body.strip())

        before, after = body[:first], body[first:]
        return self._join(frontmatter, before + "\n\n" + rendered + "\n" + after.strip())

    @staticmethod
    def _join(frontmatter: str, body: str) -> str:
        if not frontmatter:
            return body
        return frontmatter + "\n" + body

    @staticmethod
    def _first_heading_end(body: str) -> int | None:
        offset = 0
        in_fence = False
        for line in body.split("\n"):
            if re.match(r"^[ \t]*(```|~~~)", line):
                in_fence = not in_fence
            elif not in_fence and re.match(r"^#{1,6}\s+\S", line):
                return offset + len(line)
            offset += len(line) + 1
        return None

    def has_existing_toc(self, content: str) -> bool:
        return any(pattern.search(content) for pattern in _EXISTING_TOC_PATTERNS)

    def remove_existing_toc(self, content: str) -> str:
        content = _MARKDOWN_TOC_RE.sub("", content)
        return _HTML_TOC_RE.sub("", content)
