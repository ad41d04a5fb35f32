"""
Expansion of the `blockProps` placeholder in render templates.

Authors mark the block's wrapper element with a bare `blockProps`
attribute; it becomes a call to WordPress's get_block_wrapper_attributes().
"""

import re

BLOCK_PROPS_PATTERN = re.compile(r"(<[^>]+?)(\s+)blockProps\b(\s*[^>]*?>)", re.IGNORECASE)

_CLASS_VALUE = re.compile(r"""class=["']([^"']*)["']""")
_CLASS_ATTRIBUTE = re.compile(r"""\s*class=["'][^"']*["']""")

WRAPPER_CALL = "<?php echo get_block_wrapper_attributes(); ?>"


def _seeded_wrapper_call(css_class: str) -> str:
    return f"<?php echo get_block_wrapper_attributes(array( 'class' => '{css_class}' )); ?>"


def _expand(match: "re.Match[str]") -> str:
    before, after = match.group(1), match.group(3)

    if after.strip() == ">":
        return f"{before} {WRAPPER_CALL}{after}"

    existing = after[:-1].strip()
    class_match = _CLASS_VALUE.search(existing)
    remaining = _CLASS_ATTRIBUTE.sub("", existing).strip()
    remaining = f" {remaining}" if remaining else ""

    if class_match is None:
        return f"{before} {WRAPPER_CALL}{remaining}>"
    return f"{before} {_seeded_wrapper_call(class_match.group(1))}{remaining}>"


def expand_block_props(template: str) -> str:
    """
    Replace every `blockProps` placeholder.

    `<div blockProps>` -> `<div <?php echo get_block_wrapper_attributes(); ?>>`
    `<div blockProps class="a" id="b">` keeps `id="b"` after the call and
    passes `a` as the seed class. Text without a placeholder is returned
    unchanged.
    """
    if not template:
        return template
    return BLOCK_PROPS_PATTERN.sub(_expand, template)


def has_block_props(template: str) -> bool:
    return bool(template) and BLOCK_PROPS_PATTERN.search(template) is not None
