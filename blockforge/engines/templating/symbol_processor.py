"""
Symbol tag resolution.

Render templates may reference shared symbols with React-like tags:

    <ProductCard title="Hello" />

Each tag is replaced by the output of `symbols/product-card.php`, rendered
with the tag's attributes available as `$symbol_attrs`. WordPress editor
components (`<InnerBlocks />` and friends) are never treated as symbols.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from blockforge.engines.templating.attribute_parser import AttributeParser, RegexAttributeParser
from blockforge.engines.templating.renderers import TemplateRenderer
from blockforge.errors import RenderError
from blockforge.logging_config import get_logger

logger = get_logger(__name__)

SYMBOL_PATTERN = re.compile(r"<([A-Z][a-zA-Z0-9]*)\s*([^>]*?)\s*/\s*>")

RESERVED_COMPONENTS = frozenset({
    "InnerBlocks",
    "RichText",
    "MediaUpload",
    "BlockControls",
    "InspectorControls",
    "ColorPalette",
    "PlainText",
})

# Void HTML elements and SVG shapes that may legitimately self-close
SELF_CLOSING_ALLOWED_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link",
    "meta", "param", "source", "track", "wbr",
    "path", "circle", "ellipse", "line", "polyline", "polygon", "rect", "stop", "use",
})

_SELF_CLOSING_TAG = re.compile(r"<([a-z][\w:-]*)([^>]*)/>", re.IGNORECASE)
_UPPERCASE_NOT_FIRST = re.compile(r"(?<!^)[A-Z]")

RenderCallback = Callable[[Dict[str, Any], str, Any], str]


def to_kebab_case(name: str) -> str:
    """Button -> button, ProductCard -> product-card."""
    return _UPPERCASE_NOT_FIRST.sub(lambda m: "-" + m.group(0), name).lower()


def has_symbols(content: str) -> bool:
    return bool(content) and SYMBOL_PATTERN.search(content) is not None


def file_has_symbols(path: Path) -> bool:
    path = Path(path)
    if not path.is_file():
        return False
    return has_symbols(path.read_text(encoding="utf-8", errors="replace"))


def templates_with_symbols(blocks_dir: Path) -> List[Path]:
    """Every `<block>/render.php` under `blocks_dir` that contains symbol tags."""
    blocks_dir = Path(blocks_dir)
    if not blocks_dir.is_dir():
        return []
    return [path for path in sorted(blocks_dir.glob("*/render.php")) if file_has_symbols(path)]


def normalize_self_closing_tags(html: str) -> str:
    """
    `<button class="x" />` -> `<button class="x"></button>`.

    Void elements and SVG shapes keep their self-closing form.
    """
    if not html:
        return html

    def _replace(match: "re.Match[str]") -> str:
        tag = match.group(1)
        if tag.lower() in SELF_CLOSING_ALLOWED_TAGS:
            return match.group(0)
        attributes = match.group(2).rstrip()
        return f"<{tag}{attributes}></{tag}>"

    return _SELF_CLOSING_TAG.sub(_replace, html)


class InnerContentProcessor(ABC):
    """Resolves `<InnerBlocks />` style inner content in a template."""

    @abstractmethod
    def has_inner_content(self, template_path: Path) -> bool:
        ...

    @abstractmethod
    def process_template(
        self,
        template_path: Path,
        attributes: Dict[str, Any],
        content: str,
        block: Any = None,
    ) -> str:
        ...


class SymbolProcessor:
    """
    Replaces symbol tags with rendered symbol files.

    Never raises for a single symbol: a missing file or a failed render
    is replaced by an HTML comment so the rest of the page still renders.

    Usage:
        processor = SymbolProcessor(PhpCliRenderer.from_settings())
        html = processor.process_symbols(rendered, blocks_dir / "hero")
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        attribute_parser: Optional[AttributeParser] = None,
        symbols_dir_name: str = "symbols",
    ):
        self.renderer = renderer
        self.attribute_parser = attribute_parser or RegexAttributeParser()
        self.symbols_dir_name = symbols_dir_name

    def symbol_path(self, template_dir: Path, component_name: str) -> Path:
        return Path(template_dir).parent / self.symbols_dir_name / f"{to_kebab_case(component_name)}.php"

    def process_symbols(self, content: str, template_dir: Path) -> str:
        if not has_symbols(content):
            return content

        def _resolve(match: "re.Match[str]") -> str:
            component_name = match.group(1)
            if component_name in RESERVED_COMPONENTS:
                return match.group(0)

            symbol_file = self.symbol_path(template_dir, component_name)
            if not symbol_file.is_file():
                return f"<!-- Symbol not found: {symbol_file.name} -->"

            symbol_attrs = self.attribute_parser.parse(match.group(2).strip())
            try:
                output = self.renderer.render(symbol_file, {"symbol_attrs": symbol_attrs})
            except RenderError as e:
                logger.error(
                    "Symbol %s failed to render: %s",
                    symbol_file.name,
                    e.message,
                    extra={"symbol": component_name, "details": e.details},
                )
                return f"<!-- Symbol failed to render: {symbol_file.name} -->"
            return normalize_self_closing_tags(output)

        return SYMBOL_PATTERN.sub(_resolve, content)

    def process_template(
        self,
        template_path: Path,
        attributes: Optional[Dict[str, Any]] = None,
        content: str = "",
        block: Any = None,
    ) -> str:
        """Render a block template, then resolve the symbols in its output."""
        template_path = Path(template_path)
        if not template_path.is_file():
            return ""

        attributes = attributes or {}
        rendered = self.renderer.render(template_path, {
            "attributes": attributes,
            "content": content,
            "block": block,
            "block_attributes": attributes,
            "block_content": content,
            "block_instance": block,
        })
        return self.process_symbols(rendered, template_path.parent)

    def create_render_callback(
        self,
        template_path: Path,
        inner_content: Optional[InnerContentProcessor] = None,
    ) -> RenderCallback:
        """
        Build the `(attributes, content, block) -> html` render callback.

        Inner content is resolved first when the template has any; symbol
        resolution then runs on that output.
        """
        template_path = Path(template_path)

        def render(attributes: Dict[str, Any], content: str, block: Any = None) -> str:
            if inner_content is not None and inner_content.has_inner_content(template_path):
                processed = inner_content.process_template(template_path, attributes, content, block)
                return self.process_symbols(processed, template_path.parent)
            return self.process_template(template_path, attributes, content, block)

        return render
