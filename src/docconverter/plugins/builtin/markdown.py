"""Markdown processor (links, images, TOC) and content-analysis enhancer."""

import logging
from pathlib import Path

from docconverter.converters import get_supported_extensions
from docconverter.metadata import DocumentMetadata, analyze_content
from docconverter.plugins.builtin.links import LinkImageProcessor
from docconverter.plugins.builtin.toc import TocGenerator
from docconverter.plugins.types import FileProcessor, MetadataEnhancer, PluginInfo, ProcessingContext

log = logging.getLogger(__name__)

MARKDOWN_PROCESSOR = PluginInfo(
    name="markdown-processor",
    version="1.0.0",
    description="Repairs internal links, copies images and inserts a table of contents",
)
MARKDOWN_ENHANCER = PluginInfo(
    name="markdown-enhancer",
    version="1.0.0",
    description="Adds reading time, word count, content type and complexity",
)


def process_markdown(content: str, context: ProcessingContext) -> str:
    options = context.options

    if options.fix_links or options.process_images:
        base_dir = Path(context.data.get("base_dir") or context.input_path.parent)
        processor = LinkImageProcessor(
            base_dir=base_dir,
            output_dir=options.output_dir,
            fix_links=options.fix_links,
            process_images=options.process_images,
            dry_run=options.dry_run,
        )
        processed = processor.process(content, context.input_path, context.output_path)
        content = processed.content

        links, images = processed.link_report(), processed.image_report()
        if links.total or images.total:
            log.info(
                "%s: %d link(s), %d repaired, %d broken; %d image(s), %d copied, %d missing",
                context.filename,
                links.total,
                links.repaired,
                links.broken,
                images.total,
                images.copied,
                images.missing,
            )

    if options.generate_toc:
        toc = TocGenerator(max_depth=options.toc_max_depth, min_entries=options.toc_min_headings)
        if toc.has_existing_toc(content):
            log.debug("%s already has a table of contents", context.filename)
        else:
            content = toc.insert(content)

    return content


def enhance_with_analysis(metadata: DocumentMetadata, content: str, context: ProcessingContext) -> DocumentMetadata:
    analysis = analyze_content(context.data.get("body", content), context.input_path)
    return DocumentMetadata(
        reading_time=analysis.reading_time,
        word_count=analysis.word_count,
        content_type=analysis.content_type,
        complexity=analysis.complexity,
    )


def create_markdown_processor() -> FileProcessor:
    return FileProcessor(
        info=MARKDOWN_PROCESSOR,
        extensions=tuple(get_supported_extensions()),
        process=process_markdown,
    )


def create_markdown_enhancer() -> MetadataEnhancer:
    return MetadataEnhancer(info=MARKDOWN_ENHANCER, enhance=enhance_with_analysis, priority=50)
