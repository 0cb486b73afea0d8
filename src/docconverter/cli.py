"""Click CLI interface for DocConverter."""

import logging
from pathlib import Path

import click

from docconverter import __version__
from docconverter.config import ConfigError, ConversionOptions, load_options
from docconverter.converter import DocumentConverter
from docconverter.converters import MARKDOWN_EXTENSIONS
from docconverter.frontmatter import FrontmatterRepair, split_frontmatter
from docconverter.plugins.builtin.markdown import process_markdown
from docconverter.plugins.orchestrator import PluginOrchestrator
from docconverter.plugins.registry import PluginRegistry
from docconverter.utils.file_utils import matches_ignore_pattern

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _setup_logging(verbose: bool) -> None:
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


def _build_options(config: Path | None, **overrides) -> ConversionOptions:
    try:
        if config is not None:
            return load_options(config, **overrides)
        return ConversionOptions.from_mapping({k: v for k, v in overrides.items() if v is not None})
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="'--config'") from e
    except TypeError as e:
        raise click.BadParameter(f"Invalid configuration value: {e}", param_hint="'--config'") from e


def _existing_paths(paths: tuple[str, ...]) -> list[Path]:
    path_list: list[Path] = []
    for p in paths:
        path = Path(p)
        if not path.exists():
            raise click.BadParameter(f"Path '{p}' does not exist.", param_hint="'PATHS'")
        path_list.append(path)
    return path_list


def _markdown_files(paths: list[Path], ignore_patterns: list[str]) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_file():
            files.append(path)
            continue
        for candidate in sorted(path.rglob("*")):
            if (
                candidate.is_file()
                and candidate.suffix.lower() in MARKDOWN_EXTENSIONS
                and not matches_ignore_pattern(candidate.relative_to(path), ignore_patterns)
            ):
                files.append(candidate)
    return files


config_option = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON file with conversion options.",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
dry_run_option = click.option(
    "--dry-run",
    is_flag=True,
    help="Preview changes without writing files.",
)


@click.group()
@click.version_option(version=__version__, prog_name="docconverter")
def main():
    """DocConverter - Convert documents into Starlight-ready Markdown.

    Supports DOCX, HTML, RTF, JSON, plain text and source files, and
    existing Markdown/MDX.
    """
    pass


@main.command()
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory. Default: src/content/docs.",
)
@config_option
@click.option("--flat", is_flag=True, help="Don't preserve directory structure.")
@click.option("--no-titles", is_flag=True, help="Don't auto-generate titles.")
@click.option("--no-descriptions", is_flag=True, help="Don't auto-generate descriptions.")
@click.option("--timestamps", is_flag=True, help="Add lastUpdated timestamps.")
@click.option("--category", type=str, help="Default category for documents.")
@click.option("--fix-links", is_flag=True, help="Fix internal links during conversion.")
@click.option("--process-images", is_flag=True, help="Copy images into the assets directory.")
@click.option("--generate-toc", is_flag=True, help="Insert a table of contents.")
@click.option("--mdx", is_flag=True, help="Rewrite callouts, tabs and cards as Starlight components.")
@click.option("--repair", is_flag=True, help="Repair existing front matter of Markdown sources.")
@click.option("--validate", is_flag=True, help="Score each document after conversion.")
@dry_run_option
@verbose_option
def convert(
    paths: tuple[str, ...],
    output: Path | None,
    config: Path | None,
    flat: bool,
    no_titles: bool,
    no_descriptions: bool,
    timestamps: bool,
    category: str | None,
    fix_links: bool,
    process_images: bool,
    generate_toc: bool,
    mdx: bool,
    repair: bool,
    validate: bool,
    dry_run: bool,
    verbose: bool,
):
    """Convert files and directories to Markdown with front matter.

    \b
    Examples:
        docconverter convert notes.docx
        docconverter convert ./documents/ -o ./src/content/docs/
        docconverter convert ./docs/ --mdx --generate-toc --dry-run
    """
    _setup_logging(verbose)
    path_list = _existing_paths(paths)

    options = _build_options(
        config,
        output_dir=output,
        preserve_structure=False if flat else None,
        generate_titles=False if no_titles else None,
        generate_descriptions=False if no_descriptions else None,
        add_timestamps=timestamps or None,
        default_category=category,
        fix_links=fix_links or None,
        process_images=process_images or None,
        generate_toc=generate_toc or None,
        mdx_mode=mdx or None,
        repair_mode=repair or None,
        validate_content=validate or None,
        dry_run=dry_run or None,
        verbose=verbose or None,
    )
    converter = DocumentConverter(options)

    results = []
    for path in path_list:
        if path.is_dir():
            results.extend(converter.convert_directory(path))
        else:
            results.append(converter.convert_file(path))

    if not results:
        click.echo("No files found to convert.")
        return

    for result in results:
        if result.skipped:
            if verbose:
                click.echo(f"[SKIP] {result.filename}: {result.error_message}")
        elif result.success:
            prefix = "[DRY]" if options.dry_run else "[OK]"
            click.echo(f"{prefix} {result.filename} -> {result.output_path}")
            for report in result.quality_reports:
                click.echo(f"     {report.validator}: {report.score} ({report.level})")
        else:
            click.echo(f"[ERROR] {result.filename}: {result.error}", err=True)

    click.echo()
    click.echo(converter.format_stats())


@main.command("repair")
@click.argument("paths", nargs=-1, required=True)
@config_option
@click.option("--fix-links", is_flag=True, help="Fix internal links and references.")
@click.option("--generate-toc", is_flag=True, help="Insert a table of contents.")
@dry_run_option
@verbose_option
def repair_command(
    paths: tuple[str, ...],
    config: Path | None,
    fix_links: bool,
    generate_toc: bool,
    dry_run: bool,
    verbose: bool,
):
    """Repair front matter of existing Markdown/MDX files in place."""
    _setup_logging(verbose)
    path_list = _existing_paths(paths)
    options = _build_options(
        config,
        fix_links=fix_links or None,
        generate_toc=generate_toc or None,
        dry_run=dry_run or None,
    )

    repairer = FrontmatterRepair(options)
    orchestrator = PluginOrchestrator(PluginRegistry())
    files = _markdown_files(path_list, options.ignore_patterns)

    repaired = failed = 0
    for file_path in files:
        content = file_path.read_text(encoding="utf-8")
        result = repairer.repair(content, file_path)
        if not result.success:
            failed += 1
            click.echo(f"[ERROR] {file_path.name}: {result.error}", err=True)
            continue

        updated = result.repaired_content
        if options.fix_links or options.generate_toc:
            context = orchestrator.create_context(file_path, file_path, options, {"content": content})
            _, body = split_frontmatter(updated)
            processed = process_markdown(body, context)
            if processed != body:
                updated = updated[: len(updated) - len(body)] + processed

        if updated == content:
            if verbose:
                click.echo(f"[OK] {file_path.name}: no repairs needed")
            continue

        repaired += 1
        click.echo(f"[FIXED] {file_path.name}")
        if verbose:
            for issue in result.issues:
                click.echo(f"  - {issue}")
        if not options.dry_run:
            file_path.write_text(updated, encoding="utf-8")

    click.echo()
    verb = "Would repair" if options.dry_run else "Repaired"
    click.echo(f"{verb} {repaired} of {len(files)} file(s), {failed} error(s).")


@main.command("validate")
@click.argument("paths", nargs=-1, required=True)
@config_option
@click.option("--show-details", is_flag=True, help="Show issues for every file, not only invalid ones.")
@verbose_option
def validate_command(
    paths: tuple[str, ...],
    config: Path | None,
    show_details: bool,
    verbose: bool,
):
    """Validate front matter and content quality of Markdown/MDX files."""
    _setup_logging(verbose)
    path_list = _existing_paths(paths)
    options = _build_options(config)

    repairer = FrontmatterRepair(options)
    files = _markdown_files(path_list, options.ignore_patterns)

    valid_count = 0
    for file_path in files:
        validation = repairer.validate_content(file_path.read_text(encoding="utf-8"), file_path)
        report = validation.report
        status = "Valid" if validation.valid else "Issues"
        click.echo(f"{file_path.name}: {status} - quality {report.level.upper()} ({report.score})")

        if validation.valid:
            valid_count += 1
        if show_details or not validation.valid:
            for issue in report.issues:
                click.echo(f"  [{issue.type}] {issue.message}")

    click.echo()
    click.echo(f"Validated {len(files)} file(s), {valid_count} valid.")


if __name__ == "__main__":
    main()
