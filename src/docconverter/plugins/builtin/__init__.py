"""Built-in processors, enhancers and validators."""

from docconverter.config import ConversionOptions
from docconverter.frontmatter import FrontmatterRepair
from docconverter.plugins.builtin.frontmatter import create_frontmatter_enhancer, create_frontmatter_validator
from docconverter.plugins.builtin.jsx import JSXTransformer, TransformRule, create_jsx_processor
from docconverter.plugins.builtin.links import LinkImageProcessor
from docconverter.plugins.builtin.markdown import create_markdown_enhancer, create_markdown_processor
from docconverter.plugins.builtin.mdx import create_mdx_enhancer
from docconverter.plugins.builtin.quality import create_quality_validator
from docconverter.plugins.builtin.toc import TocEntry, TocGenerator
from docconverter.plugins.registry import PluginRegistry


def register_builtin_plugins(registry: PluginRegistry, options: ConversionOptions | None = None) -> None:
    """Register every built-in plugin on ``registry``.

    Processors run in this order: link/image/TOC first, then JSX.
    """
    repair = FrontmatterRepair(options)

    registry.register_processor(create_markdown_processor())
    registry.register_processor(create_jsx_processor())

    registry.register_enhancer(create_frontmatter_enhancer(repair))
    registry.register_enhancer(create_markdown_enhancer())
    registry.register_enhancer(create_mdx_enhancer())

    registry.register_validator(create_quality_validator())
    registry.register_validator(create_frontmatter_validator(repair))


__all__ = [
    "JSXTransformer",
    "LinkImageProcessor",
    "TocEntry",
    "TocGenerator",
    "TransformRule",
    "register_builtin_plugins",
]
