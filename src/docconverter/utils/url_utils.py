"""URL classification helpers for link rewriting."""

from urllib.parse import urlparse


def is_external(value: str) -> bool:
    """Anything with a scheme (http, mailto, ftp...) or protocol-relative."""
    if value.startswith("//"):
        return True
    scheme = urlparse(value).scheme
    # single letters are Windows drive letters
    return len(scheme) > 1


def is_anchor(value: str) -> bool:
    return value.startswith("#")


def split_fragment(target: str) -> tuple[str, str]:
    """Split 'path#frag' into ('path', '#frag'); fragment may be empty."""
    path, sep, fragment = target.partition("#")
    return path, sep + fragment


def strip_title(target: str) -> tuple[str, str]:
    """Separate a markdown link title: 'a.md "Title"' -> ('a.md', ' "Title"')."""
    target = target.strip()
    for quote in ('"', "'"):
        index = target.find(" " + quote)
        if index != -1 and target.endswith(quote):
            return target[:index], target[index:]
    return target, ""
