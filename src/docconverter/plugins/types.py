"""Plugin descriptors, processing context and quality report types."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from docconverter.config import ConversionOptions
from docconverter.metadata import DocumentMetadata

HIGH_QUALITY = 80
MEDIUM_QUALITY = 60


def quality_level(score: int) -> str:
    """Map a 0-100 score to high/medium/low."""
    if score >= HIGH_QUALITY:
        return "high"
    if score >= MEDIUM_QUALITY:
        return "medium"
    return "low"


@dataclass(frozen=True)
class PluginInfo:
    """Identity of a plugin."""

    name: str
    version: str
    description: str = ""
    author: str = ""

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class ProcessingContext:
    """Per-file state handed to every plugin. Created once per file."""

    input_path: Path
    output_path: Path | None
    filename: str
    extension: str
    options: ConversionOptions
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))


@dataclass
class QualityIssue:
    """A single finding from a validator."""

    type: str  # error | warning | info
    message: str
    severity: int = 5
    code: str | None = None
    line: int | None = None


@dataclass
class QualityReport:
    """Outcome of one validator run."""

    score: int
    level: str
    issues: list[QualityIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    validator: str = ""

    @classmethod
    def from_score(
        cls,
        score: float,
        issues: list[QualityIssue] | None = None,
        suggestions: list[str] | None = None,
        validator: str = "",
    ) -> "QualityReport":
        value = max(0, min(100, round(score)))
        return cls(
            score=value,
            level=quality_level(value),
            issues=issues or [],
            suggestions=suggestions or [],
            validator=validator,
        )

    @property
    def errors(self) -> list[QualityIssue]:
        return [issue for issue in self.issues if issue.type == "error"]

    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues if issue.code]


ContentHook = Callable[[str, ProcessingContext], str]
EnhanceHook = Callable[[DocumentMetadata, str, ProcessingContext], DocumentMetadata]
ValidateHook = Callable[[str, ProcessingContext], QualityReport]


@dataclass
class FileProcessor:
    """Content transform applied to files with matching extensions.

    ``validate`` is an optional gate; when it returns False the processor
    is skipped for that file.
    """

    info: PluginInfo
    extensions: tuple[str, ...] = ()
    process: ContentHook | None = None
    validate: Callable[[ProcessingContext], bool] | None = None
    preprocess: ContentHook | None = None
    postprocess: ContentHook | None = None

    def handles(self, extension: str) -> bool:
        return extension.lower() in self.extensions


@dataclass
class MetadataEnhancer:
    """Contributes metadata fields. Higher priority runs first."""

    info: PluginInfo
    enhance: EnhanceHook | None = None
    priority: int = 0
    extensions: tuple[str, ...] | None = None

    def handles(self, extension: str) -> bool:
        return self.extensions is None or extension.lower() in self.extensions


@dataclass
class QualityValidator:
    """Scores a finished document."""

    info: PluginInfo
    validate: ValidateHook | None = None
    extensions: tuple[str, ...] | None = None

    def handles(self, extension: str) -> bool:
        return self.extensions is None or extension.lower() in self.extensions
