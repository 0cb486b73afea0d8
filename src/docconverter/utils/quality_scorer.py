"""Content quality scoring for finished documents."""

import re

from docconverter.metadata import DocumentMetadata
from docconverter.plugins.types import QualityIssue

PLACEHOLDERS = [
    "lorem ipsum", "todo", "tbd", "fixme", "xxx", "placeholder", "coming soon", "under construction",
]
COLOR_WORDS = ["red", "green", "blue", "yellow", "orange", "purple"]


def score_quality(body: str, metadata: DocumentMetadata) -> tuple[int, list[QualityIssue]]:
    """Score a document body and its metadata.

    Returns a score from 0 to 100 and the issues found along the way.
    The score is a weighted average of metadata, structure, content and
    accessibility sub-scores.

    Args:
        body: Markdown body without front matter.
        metadata: Front matter of the document.

    Returns:
        (score, issues)
    """
    issues: list[QualityIssue] = []

    scores = [
        (_metadata_score(metadata, issues), 0.25),
        (_structure_score(body, issues), 0.30),
        (_content_score(body, issues), 0.35),
        (_accessibility_score(body, issues), 0.10),
    ]

    return round(sum(score * weight for score, weight in scores)), issues


def _metadata_score(metadata: DocumentMetadata, issues: list[QualityIssue]) -> int:
    score = 100
    title = metadata.title or ""
    description = metadata.description or ""

    if not title:
        issues.append(QualityIssue("error", "Missing title", 9, "missing-title"))
        score -= 30
    elif len(title) < 5:
        issues.append(QualityIssue("warning", "Title is very short (less than 5 characters)", 6, "short-title"))
        score -= 15
    elif len(title) > 100:
        issues.append(QualityIssue("warning", "Title is very long (over 100 characters)", 4, "long-title"))
        score -= 10

    if not description:
        issues.append(QualityIssue("warning", "Missing description", 7, "missing-description"))
        score -= 20
    elif len(description) < 20:
        issues.append(
            QualityIssue("warning", "Description is very short (less than 20 characters)", 5, "short-description")
        )
        score -= 10
    elif len(description) > 300:
        issues.append(QualityIssue("info", "Description is quite long (over 300 characters)", 2, "long-description"))
        score -= 5

    if not metadata.category:
        issues.append(QualityIssue("info", "No category specified", 3, "missing-category"))
        score -= 5

    if not metadata.tags:
        issues.append(QualityIssue("info", "No tags specified", 2, "missing-tags"))
        score -= 5
    elif len(metadata.tags) > 10:
        issues.append(QualityIssue("warning", "Too many tags (over 10)", 3, "too-many-tags"))
        score -= 5

    return max(0, score)


def _structure_score(body: str, issues: list[QualityIssue]) -> int:
    score = 100
    levels = [len(m.group(1)) for m in re.finditer(r"^(#{1,6})\s+.+$", body, re.MULTILINE)]

    if not levels:
        issues.append(QualityIssue("warning", "No headings found - content may lack structure", 6, "no-headings"))
        score -= 20
    elif len(levels) > 20:
        issues.append(
            QualityIssue("info", "Many headings found - consider consolidating content", 2, "many-headings")
        )
        score -= 5

    if any(level > prev + 1 for prev, level in zip(levels, levels[1:])):
        issues.append(
            QualityIssue("warning", "Heading hierarchy has gaps (e.g., H1 followed by H3)", 4, "heading-hierarchy")
        )
        score -= 10

    word_count = len(body.split())
    if word_count < 50:
        issues.append(QualityIssue("warning", "Content is very short (less than 50 words)", 5, "short-content"))
        score -= 15
    elif word_count > 5000:
        issues.append(
            QualityIssue("info", "Content is very long (over 5000 words) - consider splitting", 2, "long-content")
        )
        score -= 5

    if re.search(r"^```[ \t]*\n", body, re.MULTILINE):
        # only opening fences count; closing fences look the same
        fences = re.findall(r"^```(\S*)", body, re.MULTILINE)
        if any(not lang for lang in fences[::2]):
            issues.append(
                QualityIssue("info", "Some code blocks lack language specification", 1, "code-language")
            )
            score -= 2

    return max(0, score)


def _content_score(body: str, issues: list[QualityIssue]) -> int:
    score = 100
    lower = body.lower()

    for placeholder in PLACEHOLDERS:
        if re.search(r"\b" + re.escape(placeholder) + r"\b", lower):
            issues.append(QualityIssue("warning", f'Found placeholder text: "{placeholder}"', 7, "placeholder"))
            score -= 15

    links = re.findall(r"\[[^\]]+\]\(([^)]+)\)", body)
    for url in links:
        if "example.com" in url or "localhost" in url:
            issues.append(
                QualityIssue("warning", "Found example or localhost link that may need updating", 4, "example-link")
            )
            score -= 5

    if any(url.startswith(("./", "../", "/")) for url in links):
        issues.append(
            QualityIssue("info", "Internal links found - verify they point to existing files", 3, "internal-links")
        )

    sentences = [s.strip() for s in re.split(r"[.!?]+", body) if len(s.strip()) > 10]
    if len(sentences) != len(set(sentences)):
        issues.append(QualityIssue("info", "Found potentially duplicate sentences", 2, "duplicate-sentences"))
        score -= 5

    if _garbled_ratio(body) > 0.2:
        issues.append(QualityIssue("warning", "Converted text looks garbled", 6, "garbled-text"))
        score -= 20

    return max(0, score)


def _garbled_ratio(body: str) -> float:
    """Share of tokens that look like conversion debris.

    Garbled = mostly punctuation, or runs of non-Latin symbols.
    """
    tokens = [t for t in body.split() if not re.fullmatch(r"[-*>|:=_#]+|```\w*", t)]
    if not tokens:
        return 0.0

    garbled = 0
    for token in tokens:
        alpha_count = sum(1 for c in token if c.isalnum())
        if len(token) >= 3 and alpha_count < len(token) * 0.4:
            garbled += 1
            continue

        stripped = re.sub(r"[\u00c0-\u024f]", "", token)  # Remove Latin Extended
        if re.search(r"[^\x00-\x7f]{3,}", stripped) and not any(c.isalpha() for c in stripped):
            garbled += 1

    return garbled / len(tokens)


def _accessibility_score(body: str, issues: list[QualityIssue]) -> int:
    score = 100

    missing_alt = [alt for alt in re.findall(r"!\[([^\]]*)\]\([^)]+\)", body) if not alt.strip()]
    if missing_alt:
        issues.append(QualityIssue("warning", f"{len(missing_alt)} image(s) without alt text", 6, "image-alt"))
        score -= 20

    if re.search(r"\|[^|\n]*\|", body) and not re.search(r"\|\s*:?-{2,}", body):
        issues.append(QualityIssue("warning", "Tables found without proper headers", 4, "table-headers"))
        score -= 10

    for color in COLOR_WORDS:
        if re.search(rf"\b{color}\s+(indicates?|means?|shows?)", body, re.IGNORECASE):
            issues.append(QualityIssue("info", "Content may rely on color alone for meaning", 3, "color-only"))
            score -= 5
            break

    return max(0, score)


def suggestions_for(issues: list[QualityIssue], metadata: DocumentMetadata, body: str) -> list[str]:
    suggestions: list[str] = []

    if any(issue.type == "error" for issue in issues):
        suggestions.append("Fix critical errors first, especially missing titles or descriptions")
    if any(issue.type == "warning" for issue in issues):
        suggestions.append("Address warnings to improve content quality and user experience")
    if not metadata.title or len(metadata.title) < 10:
        suggestions.append("Consider a more descriptive title that clearly explains the content")
    if not metadata.description or len(metadata.description) < 50:
        suggestions.append("Add a comprehensive description that summarizes the key points")
    if not re.search(r"^#+\s", body, re.MULTILINE):
        suggestions.append("Add headings to improve content structure and readability")
    if len(body.split()) < 100:
        suggestions.append("Consider expanding the content with more details and examples")
    if not metadata.tags:
        suggestions.append("Add relevant tags to improve discoverability")
    if "```" in body:
        suggestions.append("Ensure all code blocks specify their programming language")

    return suggestions
