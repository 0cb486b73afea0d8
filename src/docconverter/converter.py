"""Coordinator: normalize, synthesize metadata, run plugins and write documents."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from docconverter.config import ConversionOptions
from docconverter.converters import MARKDOWN_EXTENSIONS, get_converter
from docconverter.converters.base import ConversionResult
from docconverter.frontmatter import FrontmatterError, FrontmatterRepair, render_frontmatter, split_frontmatter
from docconverter.metadata import DocumentMetadata, MetadataSynthesizer
from docconverter.plugins.builtin import register_builtin_plugins
from docconverter.plugins.orchestrator import PluginOrchestrator
from docconverter.plugins.registry import PluginRegistry
from docconverter.utils.file_utils import get_skip_reason, matches_ignore_pattern
from docconverter.utils.text_utils import strip_frontmatter

log = logging.getLogger(__name__)


@dataclass
class ConversionStats:
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    formats: Counter = field(default_factory=Counter)

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.errors,
            "formats": dict(self.formats),
        }


class DocumentConverter:
    """Convert documents into front-mattered markdown for a Starlight site."""

    def __init__(
        self,
        options: ConversionOptions | None = None,
        registry: PluginRegistry | None = None,
    ):
        """Initialize the converter.

        Args:
            options: Conversion options; defaults are used when omitted.
            registry: Plugin registry. A new one with the built-in plugins
                is created when omitted.
        """
        self.options = options or ConversionOptions()
        if registry is None:
            registry = PluginRegistry()
            register_builtin_plugins(registry, self.options)
        self.registry = registry
        self.orchestrator = PluginOrchestrator(registry)
        self.synthesizer = MetadataSynthesizer(self.options)
        self.repair = FrontmatterRepair(self.options)
        self.stats = ConversionStats()

        for warning in self.orchestrator.check_setup().warnings:
            log.debug(warning)

    def convert_file(self, input_path: Path | str, output_path: Path | str | None = None) -> ConversionResult:
        """Convert a single file.

        Args:
            input_path: Source document.
            output_path: Where to write. Defaults to ``<output_dir>/<stem>.md``
                (``.mdx`` in MDX mode).

        Returns:
            ConversionResult describing the outcome. Never raises.
        """
        input_path = Path(input_path)
        if output_path is None:
            output_path = self.options.output_dir / (input_path.stem + self.options.output_suffix)

        result = self._convert(input_path, Path(output_path), _category_path(input_path))
        self._record(result)
        return result

    def convert_directory(
        self,
        input_path: Path | str,
        output_path: Path | str | None = None,
    ) -> list[ConversionResult]:
        """Convert every file below a directory, in sorted order.

        Entries matching an ignore pattern are left out of the results.
        Subdirectories map to subdirectories of the output when
        ``preserve_structure`` is set.
        """
        root = Path(input_path)
        out_dir = Path(output_path) if output_path is not None else self.options.output_dir
        results: list[ConversionResult] = []
        self._walk(root, root, out_dir, results)
        return results

    def _walk(self, root: Path, directory: Path, out_dir: Path, results: list[ConversionResult]) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            log.error("Error processing directory %s: %s", directory, e)
            return

        for entry in entries:
            relative = entry.relative_to(root)
            if matches_ignore_pattern(relative, self.options.ignore_patterns):
                log.debug("Ignoring %s", entry)
                continue

            if entry.is_dir():
                nested = out_dir / entry.name if self.options.preserve_structure else out_dir
                self._walk(root, entry, nested, results)
                continue

            target = out_dir / (entry.stem + self.options.output_suffix)
            result = self._convert(entry, target, relative)
            self._record(result)
            results.append(result)

    def _convert(self, input_path: Path, output_path: Path, category_path: Path) -> ConversionResult:
        reason = get_skip_reason(input_path, self.options.ignore_patterns)
        if reason is not None:
            log.info("Skipping %s (%s)", input_path, reason)
            return ConversionResult(
                input_path=input_path,
                skipped=True,
                error_message=f"Skipped: {reason}",
            )

        try:
            result = self._convert_document(input_path, output_path, category_path)
        except Exception as e:
            log.error("Error processing %s: %s", input_path, e)
            result = ConversionResult(input_path=input_path)
            result.error = result.error_message = f"Error processing {input_path}: {e}"
        return result

    def _convert_document(self, input_path: Path, output_path: Path, category_path: Path) -> ConversionResult:
        converter_class = get_converter(input_path.suffix)
        result = converter_class(self.options).convert(input_path)
        if not result.success:
            result.error = result.error_message = f"Error processing {input_path}: {result.error}"
            log.error(result.error)
            return result

        raw = result.markdown
        metadata, body = self._base_metadata(result, category_path)

        context = self.orchestrator.create_context(
            input_path,
            output_path,
            self.options,
            {"content": raw, "body": body, "base_dir": input_path.parent},
        )
        body = self.orchestrator.process_content(body, context)
        result.metadata = self.orchestrator.enhance_metadata(metadata, body, context)

        document = render_frontmatter(metadata) + "\n\n" + body.strip("\n") + "\n"
        if self.options.validate_content:
            result.quality_reports = self.orchestrator.validate_content(document, context)
            for report in result.quality_reports:
                log.info("%s: %s scored %d (%s)", input_path.name, report.validator, report.score, report.level)

        result.markdown = document
        result.output_path = output_path

        if self.options.dry_run:
            log.info("Would write %s", output_path)
        else:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(document, encoding="utf-8")
            log.info("Converted %s -> %s", input_path, output_path)

        return result

    def _base_metadata(self, result: ConversionResult, category_path: Path) -> tuple[DocumentMetadata, str]:
        """Metadata written to the output front matter, and the document body.

        Markdown sources keep their own front matter (repaired in repair mode);
        everything else is synthesized from the body.
        """
        raw = result.markdown
        data = None
        body = raw

        if result.input_path.suffix.lower() in MARKDOWN_EXTENSIONS:
            if self.options.repair_mode:
                repaired = self.repair.repair(raw, category_path)
                if repaired.fixed:
                    log.info("Repaired front matter of %s: %s", result.filename, ", ".join(repaired.issues))
                raw = repaired.repaired_content

            try:
                data, body = split_frontmatter(raw)
            except FrontmatterError as e:
                log.warning("Discarding unreadable front matter in %s: %s", result.filename, e)
                data, body = None, strip_frontmatter(raw)

        metadata = DocumentMetadata.from_dict(data)
        if data is None or result.needs_frontmatter:
            synthesized = self.synthesizer.synthesize(
                body,
                result.filename,
                category_path,
                title_hint=result.title_hint,
            )
            metadata = metadata.merge(synthesized)
        return metadata, body

    def _record(self, result: ConversionResult) -> None:
        if result.skipped:
            self.stats.skipped += 1
        elif result.success:
            self.stats.processed += 1
            self.stats.formats[result.input_path.suffix.lower()] += 1
        else:
            self.stats.errors += 1

    def get_stats(self) -> ConversionStats:
        return ConversionStats(
            processed=self.stats.processed,
            skipped=self.stats.skipped,
            errors=self.stats.errors,
            formats=Counter(self.stats.formats),
        )

    def format_stats(self) -> str:
        stats = self.get_stats()
        lines = [
            "Conversion statistics:",
            f"  Processed: {stats.processed} files",
            f"  Skipped: {stats.skipped} files",
            f"  Errors: {stats.errors} files",
        ]
        if stats.formats:
            lines.append("File formats processed:")
            lines.extend(f"  {ext or '(no extension)'}: {count} files" for ext, count in sorted(stats.formats.items()))
        if self.options.dry_run:
            lines.append("Dry run completed - no files were written.")
        return "\n".join(lines)


def _category_path(input_path: Path) -> Path:
    """Path used for category inference: relative to cwd when possible."""
    try:
        return input_path.resolve().relative_to(Path.cwd())
    except ValueError:
        return Path(input_path.parent.name) / input_path.name
