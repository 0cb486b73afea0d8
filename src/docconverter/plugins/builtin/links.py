"""Internal link repair and image asset copying."""

import filecmp
import hashlib
import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from docconverter.utils.url_utils import is_anchor, is_external, split_fragment, strip_title

log = logging.getLogger(__name__)

LINK_RE = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)]+)\)")
IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")


@dataclass
class LinkInfo:
    original: str
    resolved: str
    is_internal: bool
    exists: bool
    needs_repair: bool


@dataclass
class ImageInfo:
    original: str
    resolved: str
    exists: bool
    copied: bool = False
    output_path: Path | None = None
    alt: str = ""


@dataclass
class LinkReport:
    total: int = 0
    internal: int = 0
    external: int = 0
    broken: int = 0
    repaired: int = 0


@dataclass
class ImageReport:
    total: int = 0
    copied: int = 0
    external: int = 0
    missing: int = 0


@dataclass
class ProcessedContent:
    content: str
    links: list[LinkInfo] = field(default_factory=list)
    images: list[ImageInfo] = field(default_factory=list)

    def link_report(self) -> LinkReport:
        return LinkReport(
            total=len(self.links),
            internal=sum(1 for link in self.links if link.is_internal),
            external=sum(1 for link in self.links if not link.is_internal),
            broken=sum(1 for link in self.links if link.is_internal and not link.exists),
            repaired=sum(1 for link in self.links if link.needs_repair and link.exists),
        )

    def image_report(self) -> ImageReport:
        external = sum(1 for image in self.images if is_external(image.original))
        return ImageReport(
            total=len(self.images),
            copied=sum(1 for image in self.images if image.copied),
            external=external,
            missing=sum(1 for image in self.images if not image.exists and not is_external(image.original)),
        )


def _starlight_path(path: str) -> str:
    path = path.replace("\\", "/")
    path = re.sub(r"\.mdx?$", "", path)
    path = re.sub(r"(^|/)index$", "", path)
    if path in ("", "."):
        return "./"
    if path == "..":
        return "../"
    if not path.startswith(("./", "../")):
        path = "./" + path
    return path


class LinkImageProcessor:
    """Rewrite relative links and copy referenced images.

    Args:
        base_dir: Root used for links starting with '/'.
        output_dir: Documents output directory; images go to its sibling 'assets'.
        fix_links: Rewrite resolvable internal links.
        process_images: Copy local images and rewrite their references.
        dry_run: Rewrite references without touching the filesystem.
    """

    def __init__(
        self,
        base_dir: Path,
        output_dir: Path,
        fix_links: bool = True,
        process_images: bool = True,
        dry_run: bool = False,
        assets_dir: str = "assets",
    ):
        self.base_dir = Path(base_dir)
        self.output_dir = Path(output_dir)
        self.assets_path = self.output_dir.parent / assets_dir
        self.fix_links = fix_links
        self.process_images = process_images
        self.dry_run = dry_run

    def process(self, content: str, source_path: Path, target_path: Path | None = None) -> ProcessedContent:
        """Process images first, then links."""
        result = ProcessedContent(content)
        target_dir = (target_path or self.output_dir / source_path.name).parent

        if self.process_images:
            result.content = IMAGE_RE.sub(
                lambda m: self._replace_image(m, source_path, target_dir, result.images),
                result.content,
            )
        if self.fix_links:
            result.content = LINK_RE.sub(
                lambda m: self._replace_link(m, source_path, result.links),
                result.content,
            )
        return result

    def _resolve(self, target: str, source_path: Path) -> Path:
        if target.startswith("/"):
            return self.base_dir / target.lstrip("/")
        return source_path.parent / target

    def _replace_link(self, match: re.Match, source_path: Path, links: list[LinkInfo]) -> str:
        text, raw_target = match.group(1), match.group(2)
        target, title = strip_title(raw_target)

        if is_external(target) or is_anchor(target):
            links.append(LinkInfo(target, target, is_internal=False, exists=True, needs_repair=False))
            return match.group(0)

        info = self.resolve_link(target, source_path)
        links.append(info)
        if info.needs_repair and info.exists:
            return f"[{text}]({info.resolved}{title})"
        return match.group(0)

    def resolve_link(self, target: str, source_path: Path) -> LinkInfo:
        """Find the document a relative link points at, trying markdown variants."""
        path_part, fragment = split_fragment(target)
        if not path_part:
            return LinkInfo(target, target, is_internal=False, exists=True, needs_repair=False)

        resolved = self._resolve(path_part, source_path)
        candidates = [resolved]
        # "." and "" have no name to suffix
        if resolved.name:
            candidates += [resolved.with_name(resolved.name + ".md"), resolved.with_name(resolved.name + ".mdx")]
        candidates += [resolved / "index.md", resolved / "index.mdx"]

        for candidate in candidates:
            if candidate.is_file():
                relative = os.path.relpath(candidate, source_path.parent)
                rewritten = _starlight_path(relative) + fragment
                return LinkInfo(
                    original=target,
                    resolved=rewritten,
                    is_internal=True,
                    exists=True,
                    needs_repair=rewritten != target,
                )

        log.debug("Broken link in %s: %s", source_path, target)
        return LinkInfo(target, target, is_internal=True, exists=False, needs_repair=True)

    def _replace_image(
        self, match: re.Match, source_path: Path, target_dir: Path, images: list[ImageInfo]
    ) -> str:
        alt, raw_target = match.group(1), match.group(2)
        target, title = strip_title(raw_target)

        if is_external(target) or target.startswith("data:"):
            images.append(ImageInfo(target, target, exists=True, alt=alt))
            return match.group(0)

        resolved = self._resolve(target, source_path)
        if not resolved.is_file():
            log.debug("Missing image in %s: %s", source_path, target)
            images.append(ImageInfo(target, target, exists=False, alt=alt))
            return match.group(0)

        output_path = self._asset_path(resolved)
        copied = False
        if not self.dry_run:
            try:
                self.assets_path.mkdir(parents=True, exist_ok=True)
                shutil.copy2(resolved, output_path)
                copied = True
            except OSError as e:
                log.warning("Could not copy image %s: %s", resolved, e)
                images.append(ImageInfo(target, target, exists=True, alt=alt))
                return match.group(0)

        new_target = os.path.relpath(output_path, target_dir).replace("\\", "/")
        images.append(ImageInfo(target, new_target, exists=True, copied=copied, output_path=output_path, alt=alt))
        return f"![{alt or resolved.stem}]({new_target}{title})"

    def _asset_path(self, image: Path) -> Path:
        """Destination in the assets folder; a different file already there gets a hashed name."""
        output_path = self.assets_path / image.name
        if output_path.exists() and not filecmp.cmp(image, output_path, shallow=False):
            digest = hashlib.sha1(str(image.resolve()).encode("utf-8")).hexdigest()[:8]
            output_path = self.assets_path / f"{image.stem}-{digest}{image.suffix}"
        return output_path
