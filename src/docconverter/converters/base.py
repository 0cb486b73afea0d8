"""Base converter class and result dataclass."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from docconverter.config import ConversionOptions
from docconverter.metadata import DocumentMetadata


@dataclass
class ConversionResult:
    """Result of a file conversion.

    Exactly one of success, skipped or error describes how it ended.
    """

    input_path: Path
    output_path: Path | None = None
    success: bool = False
    skipped: bool = False
    error: str | None = None
    error_message: str | None = None
    metadata: DocumentMetadata | None = None
    markdown: str = ""
    quality_reports: list = field(default_factory=list)
    # Set by the format converters only
    needs_frontmatter: bool = True
    title_hint: str | None = None

    @property
    def filename(self) -> str:
        """Get the source filename."""
        return self.input_path.name

    @property
    def status(self) -> str:
        if self.skipped:
            return "skipped"
        if self.success:
            return "success"
        return "error"


class BaseConverter(ABC):
    """Abstract base class for format converters."""

    def __init__(self, options: ConversionOptions | None = None):
        """Initialize converter.

        Args:
            options: Conversion options; defaults are used when omitted.
        """
        self.options = options or ConversionOptions()

    @abstractmethod
    def convert(self, file_path: Path) -> ConversionResult:
        """Convert a file to Markdown.

        Args:
            file_path: Path to the file to convert.

        Returns:
            ConversionResult with the conversion outcome.
        """
        pass

    @classmethod
    @abstractmethod
    def supported_extensions(cls) -> list[str]:
        """Return list of supported file extensions."""
        pass

    def _read_text(self, file_path: Path) -> str:
        """Read a file as strict UTF-8; raises on undecodable bytes."""
        return file_path.read_text(encoding="utf-8")

    def _create_error_result(self, file_path: Path, error: str) -> ConversionResult:
        """Create an error result."""
        return ConversionResult(
            input_path=file_path,
            success=False,
            error=error,
            error_message=error,
        )

    def _create_success_result(
        self,
        file_path: Path,
        markdown: str,
        title_hint: str | None = None,
        needs_frontmatter: bool = True,
    ) -> ConversionResult:
        """Create a success result."""
        return ConversionResult(
            input_path=file_path,
            success=True,
            markdown=markdown,
            title_hint=title_hint,
            needs_frontmatter=needs_frontmatter,
        )

    def _clean_markdown(self, markdown: str) -> str:
        """Collapse runs of blank lines and trim trailing spaces."""
        lines = [line.rstrip() for line in markdown.split("\n")]
        cleaned_lines: list[str] = []
        prev_blank = False

        for line in lines:
            is_blank = not line
            if is_blank and prev_blank:
                continue
            cleaned_lines.append(line)
            prev_blank = is_blank

        return re.sub(r"!\[[^\]]*\]\(\)", "", "\n".join(cleaned_lines)).strip()
