"""Content quality validator plugin."""

from docconverter.frontmatter import FrontmatterError, split_frontmatter
from docconverter.metadata import DocumentMetadata
from docconverter.plugins.types import PluginInfo, ProcessingContext, QualityReport, QualityValidator
from docconverter.utils.quality_scorer import score_quality, suggestions_for
from docconverter.utils.text_utils import strip_frontmatter

CONTENT_QUALITY_VALIDATOR = PluginInfo(
    name="content-quality-validator",
    version="1.0.0",
    description="Validates content quality and provides improvement suggestions",
)


def validate_quality(content: str, context: ProcessingContext) -> QualityReport:
    try:
        data, body = split_frontmatter(content)
    except FrontmatterError:
        data, body = None, strip_frontmatter(content)

    metadata = DocumentMetadata.from_dict(data)
    score, issues = score_quality(body, metadata)
    return QualityReport.from_score(
        score,
        issues=issues,
        suggestions=suggestions_for(issues, metadata, body),
        validator=CONTENT_QUALITY_VALIDATOR.name,
    )


def create_quality_validator() -> QualityValidator:
    return QualityValidator(info=CONTENT_QUALITY_VALIDATOR, validate=validate_quality)
