"""
Templating Engine - transformations applied to block templates.

- blockProps placeholder expansion (at generation time)
- Symbol tag resolution (at render time)
"""

from blockforge.engines.templating.attribute_parser import AttributeParser, RegexAttributeParser
from blockforge.engines.templating.wrapper_attributes import expand_block_props, has_block_props
from blockforge.engines.templating.renderers import TemplateRenderer, PhpCliRenderer
from blockforge.engines.templating.symbol_processor import (
    InnerContentProcessor,
    SymbolProcessor,
    has_symbols,
    file_has_symbols,
    templates_with_symbols,
    normalize_self_closing_tags,
    to_kebab_case,
)

__all__ = [
    "AttributeParser",
    "RegexAttributeParser",
    "expand_block_props",
    "has_block_props",
    "TemplateRenderer",
    "PhpCliRenderer",
    "InnerContentProcessor",
    "SymbolProcessor",
    "has_symbols",
    "file_has_symbols",
    "templates_with_symbols",
    "normalize_self_closing_tags",
    "to_kebab_case",
]
