"""Conversion options and config file loading."""

import json
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


DEFAULT_OUTPUT_DIR = Path("src/content/docs")
DEFAULT_CATEGORY = "documentation"


class ConfigError(ValueError):
    """Raised when a configuration file or mapping is invalid."""


def default_category_patterns() -> dict[str, str]:
    """Path substring -> category name, checked in insertion order."""
    return {
        "claude": "Claude Code",
        "guide": "Guides",
        "tutorial": "Guides",
        "reference": "Reference",
        "api": "Reference",
        "ai": "AI & ML",
        "ml": "AI & ML",
        "design": "Design System",
        "project": "Projects",
        "blog": "Blog",
        "docs": "Documentation",
    }


def default_tag_patterns() -> dict[str, list[str]]:
    """Tag -> keywords that trigger it."""
    return {
        "react": ["react", "jsx", "usestate", "useeffect", "component"],
        "vue": ["vue", "vuejs", "vue.js", "nuxt"],
        "angular": ["angular", "ng-", "@component"],
        "svelte": ["svelte", "sveltekit"],
        "nodejs": ["node.js", "nodejs", "npm", "express", "fastify"],
        "python": ["python", "django", "flask", "fastapi", "pip"],
        "typescript": ["typescript", "ts", ".ts"],
        "javascript": ["javascript", "js", ".js"],
        "java": ["java", "spring", "maven", "gradle"],
        "rust": ["rust", "cargo", "rustc"],
        "go": ["golang", "go mod", "go get"],
        "postgresql": ["postgres", "postgresql", "psql"],
        "mysql": ["mysql", "mariadb"],
        "mongodb": ["mongo", "mongodb", "nosql"],
        "supabase": ["supabase", "supabase.js"],
        "aws": ["aws", "amazon web services", "s3", "ec2", "lambda"],
        "docker": ["docker", "container", "dockerfile"],
        "kubernetes": ["kubernetes", "k8s", "kubectl"],
        "terraform": ["terraform", "infrastructure as code"],
        "ai": ["artificial intelligence", "machine learning", "llm", "gpt", "claude"],
        "openai": ["openai", "gpt-3", "gpt-4", "chatgpt"],
        "api": ["api", "endpoint", "rest", "graphql"],
        "guide": ["tutorial", "guide", "walkthrough", "how-to"],
        "reference": ["reference", "documentation", "docs"],
    }


def default_ignore_patterns() -> list[str]:
    return ["node_modules/**", ".git/**", "dist/**", ".astro/**", "**/*.log", "**/.*"]


@dataclass
class MDXOptions:
    """Toggles for the markdown -> JSX component rewrites."""

    github_alerts: bool = True
    admonitions: bool = True
    expandable_sections: bool = True
    link_cards: bool = True
    cards: bool = True
    file_trees: bool = True
    tabs: bool = True
    code_groups: bool = True
    steps: bool = False
    badges: bool = True
    auto_imports: bool = True
    output_mdx: bool = True
    component_source: str = "@astrojs/starlight/components"


@dataclass
class ConversionOptions:
    """Everything the pipeline reads from its caller."""

    output_dir: Path = DEFAULT_OUTPUT_DIR
    preserve_structure: bool = True
    generate_titles: bool = True
    generate_descriptions: bool = True
    add_timestamps: bool = False
    default_category: str = DEFAULT_CATEGORY
    verbose: bool = False
    dry_run: bool = False
    category_patterns: dict[str, str] = field(default_factory=default_category_patterns)
    tag_patterns: dict[str, list[str]] = field(default_factory=default_tag_patterns)
    ignore_patterns: list[str] = field(default_factory=default_ignore_patterns)
    repair_mode: bool = False
    validate_content: bool = False
    generate_toc: bool = False
    toc_max_depth: int = 4
    toc_min_headings: int = 2
    process_images: bool = False
    fix_links: bool = False
    max_description_length: int = 160
    mdx_mode: bool = False
    mdx: MDXOptions = field(default_factory=MDXOptions)

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)

    @property
    def output_suffix(self) -> str:
        """Extension given to written documents."""
        if self.mdx_mode and self.mdx.output_mdx:
            return ".mdx"
        return ".md"

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ConversionOptions":
        """Build options from a mapping with snake_case or camelCase keys.

        Args:
            data: Parsed configuration, e.g. from a YAML file.

        Returns:
            ConversionOptions with defaults for every missing key.

        Raises:
            ConfigError: If a key is unknown or a section has the wrong shape.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}

        for raw_key, value in data.items():
            key = _snake_case(raw_key)
            # camelCase configs spell this section "mdxOptions"
            if key == "mdx_options":
                key = "mdx"
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {raw_key}")

            if key == "mdx":
                kwargs[key] = _mdx_from_mapping(value)
            else:
                kwargs[key] = value

        return cls(**kwargs)


def _mdx_from_mapping(value: Any) -> MDXOptions:
    if isinstance(value, MDXOptions):
        return value
    if not isinstance(value, dict):
        raise ConfigError("mdx options must be a mapping")

    known = {f.name for f in fields(MDXOptions)}
    kwargs = {}
    for raw_key, item in value.items():
        key = _snake_case(raw_key)
        if key not in known:
            raise ConfigError(f"Unknown mdx option: {raw_key}")
        kwargs[key] = item
    return MDXOptions(**kwargs)


def _snake_case(key: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key).lower().replace("-", "_")


def load_options(config_path: Path, **overrides: Any) -> ConversionOptions:
    """Load options from a YAML or JSON file.

    Args:
        config_path: Path to the config file.
        **overrides: Values that take precedence over the file (None is ignored).

    Returns:
        ConversionOptions built from the file plus overrides.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    try:
        if config_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return ConversionOptions.from_mapping(data)
