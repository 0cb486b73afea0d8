"""Converter registry and exports."""

from docconverter.converters.base import BaseConverter, ConversionResult
from docconverter.converters.docx import DOCXConverter
from docconverter.converters.html import HTMLConverter
from docconverter.converters.json import JSONConverter
from docconverter.converters.markdown import MarkdownConverter
from docconverter.converters.rtf import RTFConverter
from docconverter.converters.text import PlainTextConverter

# Extensions that are never read
BINARY_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".svg", ".webp", ".ico",
    ".xls", ".xlsx", ".ppt", ".pptx",
    ".zip", ".rar", ".7z", ".tar", ".gz",
    ".mp3", ".mp4", ".avi", ".mov", ".wmv", ".flv", ".wav", ".ogg",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    ".jar", ".war", ".ear", ".exe", ".dll", ".so", ".dylib", ".bin",
    ".iso", ".dmg", ".pkg", ".deb", ".rpm",
})

# Text-based files handled by the plain text converter
TEXT_EXTENSIONS = [
    ".txt", ".csv", ".tsv", ".xml", ".yaml", ".yml", ".ini", ".cfg", ".conf", ".log",
    ".sh", ".bash", ".zsh", ".fish",
    ".js", ".ts", ".jsx", ".tsx", ".py", ".rb", ".php", ".java",
    ".c", ".cpp", ".h", ".hpp", ".css", ".scss", ".sass", ".less", ".sql",
    ".go", ".rs", ".kt", ".swift", ".dart", ".r", ".m", ".gradle", ".cmake", ".dockerfile",
]

# Registry mapping file extensions to converter classes
CONVERTER_REGISTRY: dict[str, type[BaseConverter]] = {
    ".docx": DOCXConverter,
    ".doc": DOCXConverter,
    ".html": HTMLConverter,
    ".htm": HTMLConverter,
    ".rtf": RTFConverter,
    ".json": JSONConverter,
    ".md": MarkdownConverter,
    ".mdx": MarkdownConverter,
    ".markdown": MarkdownConverter,
    **{ext: PlainTextConverter for ext in TEXT_EXTENSIONS},
}

# Markdown-family extensions whose front matter is preserved
MARKDOWN_EXTENSIONS = frozenset({".md", ".mdx", ".markdown"})


def get_converter(extension: str) -> type[BaseConverter] | None:
    """Get the converter class for a given file extension."""
    return CONVERTER_REGISTRY.get(extension.lower())


def get_supported_extensions() -> list[str]:
    """Get list of supported file extensions."""
    return list(CONVERTER_REGISTRY.keys())


def is_binary_extension(extension: str) -> bool:
    return extension.lower() in BINARY_EXTENSIONS


__all__ = [
    "BaseConverter",
    "ConversionResult",
    "DOCXConverter",
    "HTMLConverter",
    "JSONConverter",
    "MarkdownConverter",
    "PlainTextConverter",
    "RTFConverter",
    "BINARY_EXTENSIONS",
    "TEXT_EXTENSIONS",
    "CONVERTER_REGISTRY",
    "MARKDOWN_EXTENSIONS",
    "get_converter",
    "get_supported_extensions",
    "is_binary_extension",
]
