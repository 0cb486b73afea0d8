"""Rewrite markdown conventions into Starlight JSX components."""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from docconverter.config import MDXOptions
from docconverter.converters import get_supported_extensions
from docconverter.plugins.types import FileProcessor, PluginInfo, ProcessingContext
from docconverter.utils.text_utils import FRONTMATTER_BLOCK_RE

log = logging.getLogger(__name__)

Replacement = str | Callable[[re.Match], str | None]

ALERT_TYPES = {
    "NOTE": "note",
    "TIP": "tip",
    "IMPORTANT": "note",
    "WARNING": "caution",
    "CAUTION": "caution",
}
ADMONITION_TYPES = {
    "note": "note",
    "info": "note",
    "tip": "tip",
    "caution": "caution",
    "warning": "caution",
    "danger": "danger",
}


@dataclass(frozen=True)
class TransformRule:
    """One pattern -> component rewrite.

    ``replacement`` may be a template or a callable; a callable returning
    None leaves that match untouched. ``option`` names the MDXOptions flag
    that enables the rule (None: always on). ``source`` defaults to the
    transformer's component source.
    """

    name: str
    pattern: re.Pattern
    replacement: Replacement
    imports: tuple[str, ...] = ()
    option: str | None = None
    source: str | None = None


def _attr(value: str) -> str:
    return value.strip().replace('"', "&quot;")


def _trailer(match: re.Match) -> str:
    # keep the blank line that separated the block from what follows
    return "\n" if match.group(0).endswith("\n\n") else ""


def _alert(match: re.Match) -> str:
    body = "\n".join(
        line for line in (re.sub(r"^>\s?", "", raw) for raw in match.group(2).split("\n")) if line.strip()
    )
    kind = ALERT_TYPES.get(match.group(1).upper(), "note")
    return f'<Aside type="{kind}">\n{body}\n</Aside>\n' + _trailer(match)


def _admonition(match: re.Match) -> str:
    kind = ADMONITION_TYPES.get(match.group(1).lower(), "note")
    title = f' title="{_attr(match.group(2))}"' if match.group(2) else ""
    return f'<Aside type="{kind}"{title}>\n{match.group(3).strip()}\n</Aside>'


def _details(match: re.Match) -> str:
    return f'<Details summary="{_attr(match.group(1))}">\n{match.group(2).strip()}\n</Details>'


def _link_card(match: re.Match) -> str:
    description = match.group(3).strip()
    desc = f' description="{_attr(description)}"' if description else ""
    return f'<LinkCard title="{_attr(match.group(1))}" href="{match.group(2).strip()}"{desc} />'


def _card(match: re.Match) -> str:
    title = f' title="{_attr(match.group(1))}"' if match.group(1) else ""
    return f"<Card{title}>\n{match.group(2).strip()}\n</Card>"


def _file_tree(match: re.Match) -> str:
    items = []
    for line in match.group(1).split("\n"):
        if not line.strip():
            continue
        indent = len(line) - len(line.lstrip())
        items.append(f"{' ' * indent}- {line.strip()}")
    return "<FileTree>\n\n" + "\n".join(items) + "\n\n</FileTree>\n" + _trailer(match)


_TAB_SPLIT_RE = re.compile(r"^###[ \t]+Tab:[ \t]*(.+?)[ \t]*$", re.M)


def _tabs(match: re.Match) -> str | None:
    parts = _TAB_SPLIT_RE.split(match.group(0))
    tabs = [(parts[i].strip(), parts[i + 1].strip()) for i in range(1, len(parts) - 1, 2)]
    if not tabs:
        return None

    lines = ["<Tabs>"]
    for label, body in tabs:
        lines += [f'  <TabItem label="{_attr(label)}">', "", body, "", "  </TabItem>"]
    lines.append("</Tabs>")
    return "\n".join(lines) + "\n" + _trailer(match)


_CODE_BLOCK_RE = re.compile(r"^```(\w+)(?:[ \t]+title=\"([^\"]+)\")?[^\n]*\n(.*?)^```", re.S | re.M)


def _code_group(match: re.Match) -> str | None:
    blocks = [
        (m.group(1), m.group(2), m.group(3).rstrip("\n"))
        for m in _CODE_BLOCK_RE.finditer(match.group(0))
    ]
    if len(blocks) < 2 or len({lang for lang, _, _ in blocks}) < 2:
        return None

    lines = ["<Tabs>"]
    for lang, title, code in blocks:
        lines += [f'  <TabItem label="{_attr(title or lang)}">', "", f"```{lang}", code, "```", "", "  </TabItem>"]
    lines.append("</Tabs>")
    return "\n".join(lines) + "\n" + _trailer(match)


def _steps(match: re.Match) -> str | None:
    heading, items = match.group(1) or "", match.group(2)
    if not heading and len(re.findall(r"^\d+\.", items, re.M)) < 3:
        return None
    return f"{heading}<Steps>\n\n{items.rstrip()}\n\n</Steps>\n" + _trailer(match)


def _badge(match: re.Match) -> str:
    variant = f' variant="{_attr(match.group(1))}"' if match.group(1) else ""
    return f'<Badge text="{_attr(match.group(2))}"{variant} />'


BUILTIN_RULES: tuple[TransformRule, ...] = (
    TransformRule(
        "github-alerts",
        re.compile(r"^>\s*\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\]\s*\n((?:>.*\n?)*)", re.I | re.M),
        _alert,
        ("Aside",),
        "github_alerts",
    ),
    TransformRule(
        "admonitions",
        re.compile(
            r"^:::+[ \t]*(note|tip|info|caution|danger|warning)(?:[ \t]+(.+?))?[ \t]*\n"
            r"((?:(?!:::).*\n?)*?)^:::+[ \t]*$",
            re.I | re.M,
        ),
        _admonition,
        ("Aside",),
        "admonitions",
    ),
    TransformRule(
        "expandable-sections",
        re.compile(r"<details>\s*<summary>(.+?)</summary>\s*([\s\S]*?)</details>", re.I),
        _details,
        ("Details",),
        "expandable_sections",
    ),
    TransformRule(
        "link-cards",
        re.compile(r"\[card:\s*(.+?)\]\((.+?)\)[ \t]*\n((?:(?!\[/card\]).*\n?)*?)\[/card\]", re.I),
        _link_card,
        ("LinkCard",),
        "link_cards",
    ),
    TransformRule(
        "cards",
        re.compile(r"^:::+[ \t]*card(?:[ \t]+(.+?))?[ \t]*\n((?:(?!:::).*\n?)*?)^:::+[ \t]*$", re.I | re.M),
        _card,
        ("Card",),
        "cards",
    ),
    TransformRule(
        "file-trees",
        re.compile(r"^```tree[ \t]*\n([\s\S]*?)^```[ \t]*(?:\n[ \t]*\n|\n|$)", re.M),
        _file_tree,
        ("FileTree",),
        "file_trees",
    ),
    TransformRule(
        "tabs",
        re.compile(
            r"^###[ \t]+Tab:[^\n]*\n"
            r"(?:###[ \t]+Tab:[^\n]*(?:\n|$)|(?!#{1,3}[ \t])[^\n]*(?:\n|$))*",
            re.M,
        ),
        _tabs,
        ("Tabs", "TabItem"),
        "tabs",
    ),
    TransformRule(
        "code-groups",
        re.compile(
            r"^(?:```\w+[^\n]*\n(?:(?!```)[^\n]*\n)*```[ \t]*(?:\n|$)(?:[ \t]*\n)*){2,}",
            re.M,
        ),
        _code_group,
        ("Tabs", "TabItem"),
        "code_groups",
    ),
    TransformRule(
        "steps",
        re.compile(
            r"^(#{2,3}[ \t]+Steps?[ \t]*\n(?:[ \t]*\n)?)?"
            r"((?:\d+\.[ \t]+[^\n]+(?:\n|$)(?:[ \t]+[^\n]*(?:\n|$))*)+)(\n?)",
            re.M,
        ),
        _steps,
        ("Steps",),
        "steps",
    ),
    TransformRule(
        "badges",
        re.compile(r"\[badge(?:\s+type=\"(.*?)\")?\](.+?)\[/badge\]"),
        _badge,
        ("Badge",),
        "badges",
    ),
)


class JSXTransformer:
    """Apply component rules in order and add the imports they need.

    Imports are inserted once, after front matter or at the top. A document
    that already contains an import statement is left without new imports.
    """

    def __init__(self, options: MDXOptions | None = None, custom_rules: Iterable[TransformRule] = ()):
        self.options = options or MDXOptions()
        self.rules = BUILTIN_RULES + tuple(custom_rules)

    def _enabled(self, rule: TransformRule) -> bool:
        return rule.option is None or bool(getattr(self.options, rule.option, False))

    def transform(self, content: str) -> tuple[str, set[tuple[str, str]]]:
        """Apply every enabled rule; returns (content, {(component, source)})."""
        imports: set[tuple[str, str]] = set()

        for rule in self.rules:
            if not self._enabled(rule):
                continue
            content, applied = self._apply(rule, content)
            if applied:
                source = rule.source or self.options.component_source
                imports.update((name, source) for name in rule.imports)
                log.debug("Applied JSX rule %s", rule.name)

        return content, imports

    @staticmethod
    def _apply(rule: TransformRule, content: str) -> tuple[str, bool]:
        applied = False

        def replace(match: re.Match) -> str:
            nonlocal applied
            if callable(rule.replacement):
                out = rule.replacement(match)
            else:
                out = match.expand(rule.replacement)
            if out is None or out == match.group(0):
                return match.group(0)
            applied = True
            return out

        return rule.pattern.sub(replace, content), applied

    def process(self, content: str) -> str:
        content, imports = self.transform(content)
        if imports and self.options.auto_imports:
            content = add_imports(content, imports)
        return content


def render_imports(imports: set[tuple[str, str]]) -> str:
    by_source: dict[str, set[str]] = {}
    for name, source in imports:
        by_source.setdefault(source, set()).add(name)
    return "\n".join(
        f"import {{ {', '.join(sorted(names))} }} from '{source}';"
        for source, names in sorted(by_source.items())
    )


def add_imports(content: str, imports: set[tuple[str, str]]) -> str:
    """Insert import statements unless the document already has any."""
    if re.search(r"^import\s+", content, re.M):
        log.debug("Document already has imports, not adding %d component(s)", len(imports))
        return content

    statements = render_imports(imports)
    match = FRONTMATTER_BLOCK_RE.match(content)
    if match:
        end = match.end()
        return content[:end] + "\n" + statements + "\n\n" + content[end:].lstrip("\n")
    return statements + "\n\n" + content.lstrip("\n")


JSX_PROCESSOR = PluginInfo(
    name="jsx-transformer",
    version="1.0.0",
    description="Rewrites alerts, admonitions, tabs and cards into Starlight components",
)


def create_jsx_processor(custom_rules: Iterable[TransformRule] = ()) -> FileProcessor:
    rules = tuple(custom_rules)

    def process(content: str, context: ProcessingContext) -> str:
        return JSXTransformer(context.options.mdx, rules).process(content)

    return FileProcessor(
        info=JSX_PROCESSOR,
        extensions=tuple(get_supported_extensions()),
        process=process,
        validate=lambda context: context.options.mdx_mode,
    )
