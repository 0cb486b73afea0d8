"""Front matter enhancer and validator plugins."""

import logging

from docconverter.frontmatter import FrontmatterError, FrontmatterRepair, split_frontmatter
from docconverter.metadata import DocumentMetadata
from docconverter.plugins.types import (
    MetadataEnhancer,
    PluginInfo,
    ProcessingContext,
    QualityReport,
    QualityValidator,
)

log = logging.getLogger(__name__)

FRONTMATTER_ENHANCER = PluginInfo(
    name="frontmatter-enhancer",
    version="1.0.0",
    description="Repairs the source front matter and contributes its fields",
)
FRONTMATTER_VALIDATOR = PluginInfo(
    name="frontmatter-validator",
    version="1.0.0",
    description="Scores title, description, content and heading structure",
)


def create_frontmatter_enhancer(repair: FrontmatterRepair) -> MetadataEnhancer:
    def enhance(metadata: DocumentMetadata, content: str, context: ProcessingContext) -> DocumentMetadata:
        source = context.data.get("content", content)
        result = repair.repair(source, context.input_path)
        if not result.success:
            return metadata

        try:
            data, _ = split_frontmatter(result.repaired_content)
        except FrontmatterError as e:
            log.warning("Repaired front matter of %s is unreadable: %s", context.filename, e)
            return metadata
        return DocumentMetadata.from_dict(data)

    return MetadataEnhancer(
        info=FRONTMATTER_ENHANCER,
        enhance=enhance,
        priority=100,
        extensions=(".md", ".mdx"),
    )


def create_frontmatter_validator(repair: FrontmatterRepair) -> QualityValidator:
    def validate(content: str, context: ProcessingContext) -> QualityReport:
        return repair.validate_content(content, context.input_path).report

    return QualityValidator(info=FRONTMATTER_VALIDATOR, validate=validate)
