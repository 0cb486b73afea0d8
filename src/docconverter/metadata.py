"""Heuristic metadata synthesis: title, description, category and tags."""

import logging
import math
import re
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from pathlib import Path
from typing import Any

from docconverter.config import ConversionOptions
from docconverter.utils.text_utils import (
    IMAGE_RE,
    LINK_RE,
    contains_keyword,
    count_code_blocks,
    humanize_filename,
    iter_headings,
    slugify,
    strip_frontmatter,
)

log = logging.getLogger(__name__)

MAX_TAGS = 8
DESCRIPTION_LIMIT = 150
MIN_DESCRIPTION_LENGTH = 20
WORDS_PER_MINUTE = 200

# Attribute name -> front matter key
_FIELD_KEYS = {
    "title": "title",
    "description": "description",
    "category": "category",
    "tags": "tags",
    "last_updated": "lastUpdated",
    "author": "author",
    "draft": "draft",
    "reading_time": "readingTime",
    "word_count": "wordCount",
    "content_type": "contentType",
    "complexity": "complexity",
}
_KEY_FIELDS = {key: attr for attr, key in _FIELD_KEYS.items()}

# Checked in this order; ties go to the earlier entry.
CONTENT_CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Reference": ["endpoint", "api", "parameter", "response", "request body", "status code"],
    "Guides": ["tutorial", "step", "getting started", "walkthrough", "how to"],
    "Business": ["business plan", "strategy", "market", "revenue", "funding", "investor"],
    "Architecture": [
        "architecture", "design pattern", "implementation", "technical", "database", "infrastructure",
    ],
    "Configuration": ["config", "setup", "installation", "environment"],
}

CONTENT_TYPE_TAGS: dict[str, re.Pattern[str]] = {
    "setup": re.compile(r"\b(install|setup|configuration)", re.I),
    "deployment": re.compile(r"\b(deploy|production|release)", re.I),
    "security": re.compile(r"\b(security|auth|permission)", re.I),
    "performance": re.compile(r"\b(performance|optimization|speed)", re.I),
    "testing": re.compile(r"\b(test|testing|unit test)", re.I),
    "debugging": re.compile(r"\b(debug|troubleshoot|error)", re.I),
    "business": re.compile(r"\b(business|strategy|plan)\b", re.I),
    "business-strategy": re.compile(r"\b(market|revenue|funding)", re.I),
}

FILENAME_TAGS = {
    "readme": "overview",
    "changelog": "changelog",
    "contributing": "contributing",
    "license": "legal",
}

_STRUCTURAL_PREFIXES = ("#", "```", "~~~", "-", "*", "+", "|", ">", "<", "import ", "export ")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s")
_CAPTION_RE = re.compile(r"^(table|figure|image|code|example)\b[^\n:]{0,10}:", re.I)
_TITLE_LINE_REJECT = ("```", "~~~", "|", "<", "![", ">", "---", "- ", "* ", "+ ", "import ", "export ")


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _coerce_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if item is not None]
    else:
        items = [str(value).strip()]
    return _unique([item for item in items if item])


def _unique(items) -> list:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


@dataclass
class DocumentMetadata:
    """Front matter for one document.

    Unknown keys read from an existing front matter block are kept in
    ``extra`` and written back unchanged.
    """

    title: str | None = None
    description: str | None = None
    category: str | None = None
    tags: list[str] = field(default_factory=list)
    last_updated: str | None = None
    author: str | None = None
    draft: bool | None = None
    reading_time: int | None = None
    word_count: int | None = None
    content_type: str | None = None
    complexity: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "DocumentMetadata":
        """Build metadata from parsed front matter (camelCase or snake_case keys)."""
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}

        for key, value in (data or {}).items():
            key = str(key)
            attr = _KEY_FIELDS.get(key) or (key if key in _FIELD_KEYS else None)
            if attr is None:
                extra[key] = value
                continue

            if attr == "tags":
                value = _coerce_tags(value)
            elif attr == "last_updated" and isinstance(value, (date, datetime)):
                value = value.isoformat()[:10]
            elif attr in ("title", "description", "category", "author") and value is not None:
                value = str(value)
            kwargs[attr] = value

        return cls(**kwargs, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        """Front matter keys for every non-empty field, extras last."""
        data: dict[str, Any] = {}
        for attr, key in _FIELD_KEYS.items():
            value = getattr(self, attr)
            if not _is_empty(value):
                data[key] = list(value) if attr == "tags" else value
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    def merge(self, other: "DocumentMetadata") -> "DocumentMetadata":
        """Return a copy with ``other`` filling only what is still empty here."""
        merged = DocumentMetadata()
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            if f.name == "tags":
                value = _unique(list(mine) + list(theirs))
            elif f.name == "extra":
                value = {**theirs, **mine}
            else:
                value = theirs if _is_empty(mine) else mine
            setattr(merged, f.name, value)
        return merged


@dataclass
class ContentAnalysis:
    """Derived statistics about a document body."""

    word_count: int
    reading_time: int
    complexity: str
    content_type: str
    headings: list[tuple[int, str]] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)


def count_words(content: str) -> int:
    """Count prose words, ignoring code, link targets and markup."""
    text = strip_frontmatter(content)
    text = re.sub(r"```[\s\S]*?```", " ", text)
    text = re.sub(r"`[^`]*`", " ", text)
    text = IMAGE_RE.sub(" ", text)
    text = LINK_RE.sub(r"\1", text)
    text = re.sub(r"<[^>]+>", " ", text)
    text = re.sub(r"[#*_~>|`-]", " ", text)
    return len([word for word in text.split() if re.search(r"\w", word)])


def _complexity(content: str, word_count: int, headings: list) -> str:
    score = 0
    if word_count > 2000:
        score += 2
    elif word_count > 800:
        score += 1

    code_blocks = count_code_blocks(content)
    if code_blocks > 5:
        score += 2
    elif code_blocks > 1:
        score += 1

    if len(headings) > 10:
        score += 1
    if re.search(r"^\|.*\|$", content, re.M):
        score += 1
    if re.search(r"\b(advanced|architecture|algorithm)\b", content, re.I):
        score += 1

    if score >= 4:
        return "complex"
    if score >= 2:
        return "moderate"
    return "simple"


def _content_type(content: str, file_path: Path) -> str:
    path = str(file_path).lower()
    lower = content.lower()

    if "tutorial" in path or re.search(r"\bstep \d+\b", lower):
        return "tutorial"
    if "guide" in path or "getting started" in lower or "how to" in lower:
        return "guide"
    if "api" in path or "reference" in path or re.search(r"\b(endpoint|parameters?|returns)\b", lower):
        return "reference"
    if "blog" in path or re.search(r"\b(posted on|published)\b", lower):
        return "blog"
    return "documentation"


def _topics(content: str, headings: list[tuple[int, str]]) -> list[str]:
    topics = [title for level, title in headings if level <= 2]
    for match in re.finditer(r"\*\*([^*]{3,40})\*\*", content):
        topics.append(match.group(1).strip())
    return _unique(topics)[:10]


def analyze_content(content: str, file_path: Path | str = "") -> ContentAnalysis:
    """Derive word count, reading time, complexity, type and structure."""
    body = strip_frontmatter(content)
    headings = [(level, title) for level, title, _ in iter_headings(body)]
    word_count = count_words(body)

    return ContentAnalysis(
        word_count=word_count,
        reading_time=max(1, math.ceil(word_count / WORDS_PER_MINUTE)),
        complexity=_complexity(body, word_count, headings),
        content_type=_content_type(body, Path(file_path)),
        headings=headings,
        topics=_topics(body, headings),
    )


def _clean_inline(text: str) -> str:
    text = IMAGE_RE.sub("", text)
    text = LINK_RE.sub(r"\1", text)
    text = re.sub(r"[#*_`\[\]]", "", text)
    return re.sub(r"\s+", " ", text).strip()


def _is_title_like(line: str) -> bool:
    line = line.strip()
    if not line or line.startswith("#"):
        return False
    if len(line) >= 100 or line.endswith("."):
        return False
    if line.startswith(_TITLE_LINE_REJECT) or _NUMBERED_RE.match(line):
        return False
    return re.search(r"[A-Za-z]", line) is not None


def _is_structural(paragraph: str) -> bool:
    return (
        paragraph.startswith(_STRUCTURAL_PREFIXES)
        or _NUMBERED_RE.match(paragraph) is not None
        or _CAPTION_RE.match(paragraph) is not None
    )


def _finish_sentence(text: str) -> str:
    text = text.rstrip(" ,;:-")
    needs_stop = bool(text) and text[-1] not in ".!?"
    # the added full stop counts against the limit
    if len(text) + needs_stop > DESCRIPTION_LIMIT:
        cut = text[:DESCRIPTION_LIMIT]
        last_space = cut.rfind(" ")
        if last_space > 100:
            cut = cut[:last_space]
        return cut.rstrip(" ,;:-") + "..."

    return text + "." if needs_stop else text


class MetadataSynthesizer:
    """Infer front matter for a document body using path and content patterns."""

    def __init__(self, options: ConversionOptions | None = None):
        self.options = options or ConversionOptions()

    def synthesize(
        self,
        content: str,
        filename: str,
        file_path: Path | str | None = None,
        title_hint: str | None = None,
    ) -> DocumentMetadata:
        """Build metadata for a normalized body.

        Args:
            content: Markdown body, without front matter.
            filename: Source filename, used for title and tag fallbacks.
            file_path: Path used for category inference. Defaults to filename.
            title_hint: Title recovered by the format normalizer, if any.

        Returns:
            DocumentMetadata with title, description, category and tags.
        """
        path = Path(file_path) if file_path is not None else Path(filename)
        metadata = DocumentMetadata()

        if self.options.generate_titles:
            metadata.title = self.extract_title(content, filename, title_hint)
        if self.options.generate_descriptions:
            metadata.description = self.extract_description(content)

        metadata.category = self.infer_category(content, path)
        metadata.tags = self.extract_tags(content, filename, metadata.category)

        if self.options.add_timestamps:
            metadata.last_updated = date.today().isoformat()

        log.debug("Synthesized metadata for %s: %s", filename, metadata)
        return metadata

    def extract_title(self, content: str, filename: str, title_hint: str | None = None) -> str:
        if title_hint and title_hint.strip():
            return re.sub(r"\s+", " ", title_hint).strip()

        match = re.search(r"<title[^>]*>(.*?)</title>", content, re.I | re.S)
        if match and match.group(1).strip():
            return re.sub(r"\s+", " ", match.group(1)).strip()

        body = strip_frontmatter(content)
        for line in body.split("\n"):
            if not line.strip():
                continue
            if _is_title_like(line):
                title = _clean_inline(line)
                if title:
                    return title
            break

        headings = iter_headings(body)
        for level, text, _ in headings:
            if level == 1:
                return _clean_inline(text)
        if headings:
            return _clean_inline(headings[0][1])

        return humanize_filename(Path(filename).name)

    def extract_description(self, content: str) -> str | None:
        """First prose paragraph, cleaned and shortened to a single sentence-ish line."""
        body = strip_frontmatter(content).strip()
        paragraphs = [p.strip() for p in re.split(r"\n\s*\n", body) if p.strip()]

        start = 0
        if len(paragraphs) > 1 and "\n" not in paragraphs[0] and _is_title_like(paragraphs[0]):
            start = 1

        for paragraph in paragraphs[start:]:
            if _is_structural(paragraph):
                continue
            cleaned = _clean_inline(paragraph)
            if len(cleaned) < MIN_DESCRIPTION_LENGTH:
                continue
            return _finish_sentence(cleaned)

        return None

    def infer_category(self, content: str, file_path: Path | str) -> str:
        path = Path(file_path)
        segments = [part for part in path.parent.parts if part not in ("", ".", "..", path.anchor)]
        segments.append(path.stem)

        for segment in segments:
            lowered = segment.lower()
            for pattern, category in self.options.category_patterns.items():
                if pattern.lower() in lowered:
                    return category

        best, best_score = None, 0
        for category, keywords in CONTENT_CATEGORY_KEYWORDS.items():
            score = sum(1 for keyword in keywords if re.search(r"\b" + re.escape(keyword), content, re.I))
            if category == "Guides" and re.search(r"^\d+\.\s", content, re.M):
                score += 1
            if score > best_score:
                best, best_score = category, score

        return best or self.options.default_category

    def extract_tags(self, content: str, filename: str, category: str | None = None) -> list[str]:
        tags: list[str] = []

        for tag, keywords in self.options.tag_patterns.items():
            if any(contains_keyword(content, keyword) for keyword in keywords):
                tags.append(tag)

        if category and category != self.options.default_category:
            tags.append(slugify(category))

        for tag, pattern in CONTENT_TYPE_TAGS.items():
            if pattern.search(content):
                tags.append(tag)

        stem = Path(filename).stem.lower()
        for name, tag in FILENAME_TAGS.items():
            if name in stem:
                tags.append(tag)

        if count_code_blocks(content) > 3:
            tags.append("code-heavy")
        if len(content) > 5000:
            tags.append("comprehensive")
        if re.search(r"\b(beginner|introduction|getting started)\b", content, re.I):
            tags.append("beginner")
        if re.search(r"\b(advanced|expert)\b", content, re.I):
            tags.append("advanced")

        return [tag for tag in _unique(tags) if len(tag) > 2][:MAX_TAGS]
