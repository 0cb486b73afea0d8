"""Plugin types and registry."""

from docconverter.plugins.registry import PluginRegistrationError, PluginRegistry
from docconverter.plugins.types import (
    FileProcessor,
    MetadataEnhancer,
    PluginInfo,
    ProcessingContext,
    QualityIssue,
    QualityReport,
    QualityValidator,
)

__all__ = [
    "FileProcessor",
    "MetadataEnhancer",
    "PluginInfo",
    "PluginRegistrationError",
    "PluginRegistry",
    "ProcessingContext",
    "QualityIssue",
    "QualityReport",
    "QualityValidator",
]
