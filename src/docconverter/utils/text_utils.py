"""Small markdown/text helpers shared across the pipeline."""

import re
from functools import lru_cache

FRONTMATTER_BLOCK_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
LINK_RE = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)]+)\)")
IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
FENCE_RE = re.compile(r"^[ \t]*(```|~~~)")


def strip_frontmatter(content: str) -> str:
    """Return content without a leading --- delimited block."""
    return FRONTMATTER_BLOCK_RE.sub("", content, count=1)


def slugify(text: str) -> str:
    """Build a URL anchor: lowercase, alphanumerics and single hyphens only."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def humanize_filename(filename: str) -> str:
    """Turn 'getting-started_guide' or 'apiReference.md' into a title."""
    stem = re.sub(r"\.[^/.]+$", "", filename)
    text = re.sub(r"[-_]+", " ", stem)
    text = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    text = re.sub(r"\b\w", lambda m: m.group(0).upper(), text)
    return re.sub(r"\s+", " ", text).strip()


def count_code_blocks(content: str) -> int:
    """Number of fenced blocks, counting each opening/closing pair once."""
    return content.count("```") // 2


def iter_headings(content: str) -> list[tuple[int, str, int]]:
    """Return (level, text, line_number) for ATX headings outside code fences."""
    headings: list[tuple[int, str, int]] = []
    in_fence = False

    for number, line in enumerate(content.split("\n"), start=1):
        if FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        match = HEADING_RE.match(line)
        if match:
            headings.append((len(match.group(1)), match.group(2).strip(), number))

    return headings


@lru_cache(maxsize=512)
def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile a case-insensitive matcher honouring word edges.

    Word boundaries are only applied at ends of the keyword that are
    alphanumeric, so '.ts' and 'ng-' still match inside 'app.ts' and 'ng-if'.
    """
    prefix = r"\b" if keyword[:1].isalnum() else ""
    suffix = r"\b" if keyword[-1:].isalnum() else ""
    return re.compile(prefix + re.escape(keyword) + suffix, re.IGNORECASE)


def contains_keyword(text: str, keyword: str) -> bool:
    return keyword_pattern(keyword).search(text) is not None
