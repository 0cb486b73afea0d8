"""Metadata enhancer for MDX documents."""

import re

from docconverter.metadata import DocumentMetadata
from docconverter.plugins.types import MetadataEnhancer, PluginInfo, ProcessingContext
from docconverter.utils.text_utils import FRONTMATTER_BLOCK_RE

MDX_ENHANCER = PluginInfo(
    name="mdx-enhancer",
    version="1.0.0",
    description="Component usage, JSX complexity and interactivity for MDX",
)

_COMPONENT_RE = re.compile(r"<([A-Z][a-zA-Z0-9]*)")

COMPONENT_TAGS = [
    (re.compile(r"<(Tabs|TabItem)", re.I), "tabs"),
    (re.compile(r"<(Card|CardGrid|LinkCard)", re.I), "cards"),
    (re.compile(r"<(Aside|Details)", re.I), "callouts"),
    (re.compile(r"<(Steps|Step)\b", re.I), "steps"),
    (re.compile(r"<(Badge|Icon)", re.I), "badges"),
    (re.compile(r"<FileTree", re.I), "file-tree"),
    (re.compile(r"<(Code|Pre)\b", re.I), "code-examples"),
    (re.compile(r"onClick|onChange|onSubmit", re.I), "interactive"),
    (re.compile(r"<(Chart|Graph|Diagram)", re.I), "visualization"),
    (re.compile(r"<(Form|Input|Button|Select)\b"), "forms"),
]

INTERACTIVE_FEATURES = [
    (re.compile(r"\bon[A-Z][a-zA-Z]*="), "event-handlers"),
    (re.compile(r"useState|useReducer|useContext"), "state-management"),
    (re.compile(r"useEffect|useLayoutEffect"), "side-effects"),
    (re.compile(r"<(form|input|button|select|textarea)\b", re.I), "forms"),
    (re.compile(r"import\s*\("), "dynamic-imports"),
    (re.compile(r"client:(load|idle|visible|media|only)"), "client-hydration"),
]


def detect_components(content: str) -> list[str]:
    return sorted(set(_COMPONENT_RE.findall(content)))


def jsx_complexity(content: str) -> str:
    """low / medium / high from components, imports, exports and expressions."""
    score = len(_COMPONENT_RE.findall(content)) * 2
    score += len(re.findall(r"^import\s+", content, re.M)) * 3
    score += len(re.findall(r"^export\s+", content, re.M)) * 5
    score += len(re.findall(r"\{[^}]+\}", FRONTMATTER_BLOCK_RE.sub("", content, count=1)))
    score += len(re.findall(r"<[A-Z][a-zA-Z0-9]*[^>]*>[\s\S]*?<[A-Z][a-zA-Z0-9]*", content)) * 3

    if score < 10:
        return "low"
    if score < 30:
        return "medium"
    return "high"


def interactive_features(content: str) -> list[str]:
    return [feature for pattern, feature in INTERACTIVE_FEATURES if pattern.search(content)]


def enhance_mdx(metadata: DocumentMetadata, content: str, context: ProcessingContext) -> DocumentMetadata:
    source = context.data.get("content", content)
    components = detect_components(source)
    features = interactive_features(source)

    tags = ["mdx"] + [tag for pattern, tag in COMPONENT_TAGS if pattern.search(source)]

    return DocumentMetadata(
        tags=tags,
        extra={
            "format": "mdx",
            "mdxComponents": components,
            "componentCount": len(components),
            "mdxComplexity": jsx_complexity(source),
            "isInteractive": bool(features),
            "interactiveFeatures": features,
            "hasFrontmatter": FRONTMATTER_BLOCK_RE.match(source) is not None,
            "hasImports": re.search(r"^import\s+", source, re.M) is not None,
        },
    )


def create_mdx_enhancer() -> MetadataEnhancer:
    return MetadataEnhancer(info=MDX_ENHANCER, enhance=enhance_mdx, priority=10, extensions=(".mdx",))
