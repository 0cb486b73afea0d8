"""Drive registered plugins over a single document."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docconverter.config import ConversionOptions
from docconverter.metadata import DocumentMetadata
from docconverter.plugins.registry import PluginRegistry
from docconverter.plugins.types import ProcessingContext, QualityReport

log = logging.getLogger(__name__)


@dataclass
class SetupReport:
    """What check_setup found about a registry."""

    ok: bool
    warnings: list[str] = field(default_factory=list)


class PluginOrchestrator:
    """Run processors, enhancers and validators for one file at a time.

    A plugin that raises is logged and skipped; the document continues from
    the last stage that succeeded.
    """

    def __init__(self, registry: PluginRegistry):
        self.registry = registry

    def create_context(
        self,
        input_path: Path,
        output_path: Path | None,
        options: ConversionOptions,
        data: Mapping[str, Any] | None = None,
    ) -> ProcessingContext:
        input_path = Path(input_path)
        return ProcessingContext(
            input_path=input_path,
            output_path=Path(output_path) if output_path else None,
            filename=input_path.name,
            extension=input_path.suffix.lower(),
            options=options,
            data=data or {},
        )

    def enhance_metadata(
        self,
        metadata: DocumentMetadata,
        content: str,
        context: ProcessingContext,
    ) -> DocumentMetadata:
        """Merge every matching enhancer's output, highest priority first.

        Fields already set win over later contributions. An enhancer may
        return DocumentMetadata or a mapping of front matter keys.
        """
        for enhancer in self.registry.get_enhancers(context.extension):
            try:
                contribution = enhancer.enhance(metadata, content, context)
                if isinstance(contribution, Mapping):
                    contribution = DocumentMetadata.from_dict(dict(contribution))
                if contribution is not None:
                    metadata = metadata.merge(contribution)
            except Exception as e:
                log.warning("Enhancer %s failed on %s: %s", enhancer.info.name, context.filename, e)
        return metadata

    def process_content(self, content: str, context: ProcessingContext) -> str:
        """Apply processors for the file's extension in registration order."""
        for processor in self.registry.get_processors_for_extension(context.extension):
            name = processor.info.name
            try:
                if processor.validate is not None and not processor.validate(context):
                    log.debug("Processor %s not applicable to %s", name, context.filename)
                    continue

                updated = content
                if processor.preprocess is not None:
                    updated = processor.preprocess(updated, context)
                updated = processor.process(updated, context)
                if processor.postprocess is not None:
                    updated = processor.postprocess(updated, context)
                if not isinstance(updated, str):
                    raise TypeError(f"expected str content, got {type(updated).__name__}")
            except Exception as e:
                log.warning("Processor %s failed on %s: %s", name, context.filename, e)
                continue
            content = updated
        return content

    def validate_content(self, content: str, context: ProcessingContext) -> list[QualityReport]:
        """Run each validator independently; reports are not merged."""
        reports: list[QualityReport] = []
        for validator in self.registry.get_validators(context.extension):
            try:
                report = validator.validate(content, context)
                if not isinstance(report, QualityReport):
                    raise TypeError(f"expected a QualityReport, got {type(report).__name__}")
                if not report.validator:
                    report.validator = validator.info.name
            except Exception as e:
                log.warning("Validator %s failed on %s: %s", validator.info.name, context.filename, e)
                continue
            reports.append(report)
        return reports

    def check_setup(self) -> SetupReport:
        stats = self.registry.get_stats()
        warnings = []
        if stats.processors == 0:
            warnings.append("No file processors registered")
        if stats.enhancers == 0:
            warnings.append("No metadata enhancers registered")
        if stats.validators == 0:
            warnings.append("No quality validators registered")
        return SetupReport(ok=not warnings, warnings=warnings)
