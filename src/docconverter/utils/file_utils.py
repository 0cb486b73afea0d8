"""Ignore patterns and skip rules for candidate files."""

from pathlib import Path

from docconverter.converters import get_converter, is_binary_extension

# Hidden files with these extensions are still converted
HIDDEN_ALLOWED_EXTENSIONS = {".md", ".html", ".htm", ".txt"}


def matches_ignore_pattern(path: Path | str, patterns: list[str]) -> bool:
    """Check a path against glob-like ignore patterns.

    Leading '**/' and trailing '/**' are dropped and the remainder is
    matched as a plain substring of the path.
    """
    text = Path(path).as_posix()
    for pattern in patterns:
        needle = pattern.replace("/**", "").replace("**/", "")
        if needle and needle in text:
            return True
    return False


def get_skip_reason(file_path: Path, ignore_patterns: list[str] | None = None) -> str | None:
    """Why a file should not be converted, or None when it should.

    Args:
        file_path: Path to the candidate file.
        ignore_patterns: Optional ignore patterns checked against the path.

    Returns:
        'ignored', 'hidden file', 'binary file', 'unsupported format' or None.
    """
    extension = file_path.suffix.lower()

    if ignore_patterns and matches_ignore_pattern(file_path, ignore_patterns):
        return "ignored"
    if file_path.name.startswith(".") and extension not in HIDDEN_ALLOWED_EXTENSIONS:
        return "hidden file"
    if is_binary_extension(extension):
        return "binary file"
    if get_converter(extension) is None:
        return "unsupported format"
    return None
