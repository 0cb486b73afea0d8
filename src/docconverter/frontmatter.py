"""Front matter parsing, rendering, repair and validation."""

import enum
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from docconverter.config import DEFAULT_CATEGORY, ConversionOptions
from docconverter.metadata import DocumentMetadata, MetadataSynthesizer, count_words
from docconverter.plugins.types import QualityIssue, QualityReport
from docconverter.utils.text_utils import (
    FRONTMATTER_BLOCK_RE,
    humanize_filename,
    iter_headings,
)

log = logging.getLogger(__name__)

BLOCK_SCALAR_THRESHOLD = 80
ERROR_PENALTY = 20
_DISALLOWED_RE = re.compile(r"[{}\[\]\"'\\]")
_PLAIN_SCALAR_RE = re.compile(r"^[A-Za-z0-9][\w .+/-]*$")

SUGGESTIONS = {
    "missing-title": "Add a descriptive title to the front matter",
    "title-length": "Keep the title between 10 and 60 characters",
    "missing-description": "Add a description of 50-160 characters",
    "description-length": "Keep the description between 50 and 160 characters",
    "no-headings": "Add headings to structure the document",
    "heading-hierarchy": "Do not skip heading levels",
    "short-content": "Expand the document with more detail",
    "empty-document": "Add content to the document",
    "invalid-yaml": "Fix the YAML syntax of the front matter block",
}


class FrontmatterError(ValueError):
    """Raised when a front matter block is not valid YAML mapping."""


class FrontmatterState(enum.Enum):
    MISSING = "missing"
    VALID = "valid"
    INVALID = "invalid"


@dataclass
class RepairResult:
    success: bool
    fixed: bool
    issues: list[str] = field(default_factory=list)
    original_content: str = ""
    repaired_content: str = ""
    error: str | None = None


@dataclass
class ValidationResult:
    valid: bool
    state: FrontmatterState
    report: QualityReport
    metadata: DocumentMetadata | None = None


def split_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """Separate a leading YAML block from the body.

    Returns:
        (data, body). data is None when there is no block.

    Raises:
        FrontmatterError: If the block is not a YAML mapping.
    """
    match = FRONTMATTER_BLOCK_RE.match(content)
    if not match:
        return None, content

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML in front matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError("Front matter must be a mapping")

    return data, content[match.end():]


def clean_string(value: str) -> str:
    """Remove characters that break YAML quoting and collapse whitespace."""
    return re.sub(r"\s+", " ", _DISALLOWED_RE.sub("", value)).strip()


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _scalar(value: str) -> str:
    """Plain when YAML reads it back as the same string (not Off, null, 2024...)."""
    if _PLAIN_SCALAR_RE.match(value) and yaml.safe_load(value) == value:
        return value
    return _quote(value)


def render_frontmatter(metadata: DocumentMetadata) -> str:
    """Render metadata as a --- delimited YAML block (no trailing newline)."""
    lines = ["---"]

    if metadata.title:
        lines.append(f"title: {_quote(metadata.title)}")

    if metadata.description:
        description = re.sub(r"\s+", " ", metadata.description).strip()
        if len(description) > BLOCK_SCALAR_THRESHOLD:
            lines.append("description: |-")
            lines.append(f"  {description}")
        else:
            lines.append(f"description: {_quote(description)}")

    if metadata.category and metadata.category != DEFAULT_CATEGORY:
        lines.append(f"category: {_scalar(metadata.category)}")

    if metadata.tags:
        lines.append("tags:")
        lines.extend(f"  - {_scalar(tag)}" for tag in metadata.tags)

    if metadata.last_updated:
        lines.append(f"lastUpdated: {metadata.last_updated}")

    rest = {
        key: value
        for key, value in metadata.to_dict().items()
        if key not in ("title", "description", "category", "tags", "lastUpdated")
    }
    if rest:
        dumped = yaml.safe_dump(rest, sort_keys=False, allow_unicode=True, default_flow_style=False)
        lines.append(dumped.rstrip("\n"))

    lines.append("---")
    return "\n".join(lines)


def _first_h1(body: str) -> str | None:
    for level, text, _ in iter_headings(body):
        if level == 1:
            return text
    return None


def _terminate(text: str) -> str:
    if text and text[-1] not in ".!?":
        return text + "."
    return text


class FrontmatterRepair:
    """Detect and fix missing or malformed front matter."""

    def __init__(self, options: ConversionOptions | None = None):
        self.options = options or ConversionOptions()
        self.max_description_length = self.options.max_description_length
        self.synthesizer = MetadataSynthesizer(self.options)

    def classify(self, content: str, path: Path | str | None = None) -> FrontmatterState:
        try:
            data, body = split_frontmatter(content)
        except FrontmatterError:
            return FrontmatterState.INVALID

        if data is None:
            return FrontmatterState.MISSING

        _, issues = self._repair_fields(dict(data), body, Path(path) if path else None)
        return FrontmatterState.INVALID if issues else FrontmatterState.VALID

    def repair(self, content: str, path: Path | str | None = None) -> RepairResult:
        """Return content with complete, clean front matter.

        Valid content comes back unchanged with ``fixed=False``.
        """
        file_path = Path(path) if path else None

        try:
            data, body = split_frontmatter(content)
        except FrontmatterError as e:
            log.warning("Cannot repair %s: %s", path or "<content>", e)
            return RepairResult(
                success=False,
                fixed=False,
                issues=[str(e)],
                original_content=content,
                repaired_content=content,
                error=str(e),
            )

        if data is None:
            metadata = self._build_missing(body, file_path)
            issues = ["Added missing frontmatter"]
        else:
            repaired, issues = self._repair_fields(dict(data), body, file_path)
            if not issues:
                return RepairResult(
                    success=True,
                    fixed=False,
                    issues=["No repairs needed"],
                    original_content=content,
                    repaired_content=content,
                )
            metadata = DocumentMetadata.from_dict(repaired)

        repaired_content = render_frontmatter(metadata) + "\n\n" + body.lstrip("\n")
        log.debug("Repaired %s: %s", path or "<content>", ", ".join(issues))
        return RepairResult(
            success=True,
            fixed=True,
            issues=issues,
            original_content=content,
            repaired_content=repaired_content,
        )

    def _build_missing(self, body: str, path: Path | None) -> DocumentMetadata:
        filename = path.name if path else "untitled"
        synthesized = self.synthesizer.synthesize(body, filename, path)

        title = clean_string(synthesized.title or "") or humanize_filename(filename)
        description = self._description_for(body, title)

        category = self._category_from_parent(path)
        if category is None and synthesized.category != self.options.default_category:
            category = synthesized.category

        return DocumentMetadata(
            title=title,
            description=description,
            category=category,
            tags=synthesized.tags,
            last_updated=synthesized.last_updated,
        )

    def _repair_fields(
        self, data: dict[str, Any], body: str, path: Path | None
    ) -> tuple[dict[str, Any], list[str]]:
        issues: list[str] = []

        title = data.get("title")
        if title is not None and not isinstance(title, str):
            title = str(title)
        cleaned_title = clean_string(title) if title else ""

        if not cleaned_title:
            fallback = _first_h1(body) or humanize_filename(path.name if path else "untitled")
            data["title"] = clean_string(fallback) or "Untitled"
            issues.append("Generated missing title")
        elif cleaned_title != title:
            data["title"] = cleaned_title
            issues.append("Cleaned title formatting")

        description = data.get("description")
        if description is not None and not isinstance(description, str):
            description = str(description)

        if not description or not clean_string(description):
            data["description"] = self._description_for(body, data["title"])
            issues.append("Generated missing description")
        else:
            cleaned = clean_string(description)
            if len(cleaned) > self.max_description_length:
                cleaned = cleaned[: self.max_description_length - 3].rstrip() + "..."
            if cleaned != description:
                data["description"] = cleaned
                issues.append("Cleaned and truncated description")

        if not data.get("category"):
            category = self._category_from_parent(path)
            if category:
                data["category"] = category
                issues.append(f"Inferred category: {category}")

        return data, issues

    def _description_for(self, body: str, title: str) -> str:
        description = self.synthesizer.extract_description(body)
        if not description:
            description = self._fallback_description(title)

        description = _terminate(clean_string(description))
        if len(description) > self.max_description_length:
            description = description[: self.max_description_length - 3].rstrip() + "..."
        return description

    @staticmethod
    def _fallback_description(title: str) -> str:
        lowered = title.lower()
        if "readme" in lowered:
            subject = re.sub(r"readme", "", title, flags=re.I).strip() or "this project"
            return f"Documentation and setup guide for {subject}."
        if "guide" in lowered:
            subject = lowered.replace("guide", "").strip() or "this topic"
            return f"Comprehensive guide covering {subject}."
        if "api" in lowered:
            subject = re.sub(r"api", "", title, flags=re.I).strip() or "this service"
            return f"API documentation and reference for {subject}."
        return f"Documentation for {title}."

    @staticmethod
    def _category_from_parent(path: Path | None) -> str | None:
        if path is None or path.parent in (Path("."), Path("")):
            return None
        name = path.parent.name
        return humanize_filename(name) if name else None

    def validate_content(self, content: str, path: Path | str | None = None) -> ValidationResult:
        """Score a document without changing it."""
        state = self.classify(content, path)
        extra_issues: list[QualityIssue] = []

        try:
            data, body = split_frontmatter(content)
        except FrontmatterError as e:
            data, body = None, FRONTMATTER_BLOCK_RE.sub("", content, count=1)
            extra_issues.append(
                QualityIssue(type="error", message=str(e), severity=9, code="invalid-yaml")
            )

        metadata = DocumentMetadata.from_dict(data)
        report = self.score(body, metadata, extra_issues)
        valid = state is FrontmatterState.VALID and not report.errors
        return ValidationResult(valid=valid, state=state, report=report, metadata=metadata)

    def score(
        self,
        body: str,
        metadata: DocumentMetadata,
        issues: list[QualityIssue] | None = None,
    ) -> QualityReport:
        """Score title, description, content and structure (0-100 each).

        The result is their mean minus a fixed penalty per error issue.
        """
        issues = list(issues or [])

        title = (metadata.title or "").strip()
        if not title:
            title_score = 0
            issues.append(QualityIssue("error", "Missing title", 10, "missing-title"))
        elif 10 < len(title) <= 60:
            title_score = 100
        else:
            title_score = 60
            issues.append(
                QualityIssue("warning", f"Title length {len(title)} is outside 11-60", 3, "title-length")
            )

        description = (metadata.description or "").strip()
        if not description:
            description_score = 0
            issues.append(QualityIssue("warning", "Missing description", 6, "missing-description"))
        elif 50 <= len(description) <= 160:
            description_score = 100
        else:
            description_score = 70
            issues.append(
                QualityIssue(
                    "info",
                    f"Description length {len(description)} is outside 50-160",
                    2,
                    "description-length",
                )
            )

        words = count_words(body)
        if not body.strip():
            issues.append(QualityIssue("error", "Document body is empty", 8, "empty-document"))
        elif words < 50:
            issues.append(QualityIssue("warning", f"Only {words} words of content", 4, "short-content"))
        content_score = 100 if words > 100 else max(40, words)

        headings = iter_headings(body)
        if headings:
            structure_score = 100
        else:
            structure_score = 50
            issues.append(QualityIssue("warning", "Document has no headings", 4, "no-headings"))

        for (prev_level, _, _), (level, text, line) in zip(headings, headings[1:]):
            if level > prev_level + 1:
                issues.append(
                    QualityIssue(
                        "warning",
                        f"Heading '{text}' skips from h{prev_level} to h{level}",
                        3,
                        "heading-hierarchy",
                        line,
                    )
                )

        mean = (title_score + description_score + content_score + structure_score) / 4
        errors = sum(1 for issue in issues if issue.type == "error")
        suggestions = []
        for code in dict.fromkeys(issue.code for issue in issues if issue.code):
            if code in SUGGESTIONS:
                suggestions.append(SUGGESTIONS[code])

        return QualityReport.from_score(
            mean - ERROR_PENALTY * errors,
            issues=issues,
            suggestions=suggestions,
            validator="frontmatter-validator",
        )
