"""
Maps stored attribute definitions to the block.json `attributes` schema.

The editor stores attribute definitions as JSON, either keyed by name:

    {"heading": {"type": "text", "default": "Hello"}}

or as a list of definitions with a `name` key:

    [{"name": "heading", "type": "text", "default": "Hello"}]

Editor control types are mapped to JSON types.
"""

import json
from typing import Any, Dict, Iterator, Tuple

from blockforge.kernel.models.content import FieldKey
from blockforge.kernel.storage import ContentStore
from blockforge.logging_config import get_logger

logger = get_logger(__name__)

JSON_TYPES = frozenset({"string", "number", "integer", "boolean", "object", "array", "null"})

CONTROL_TYPES: Dict[str, str] = {
    "text": "string",
    "textarea": "string",
    "richtext": "string",
    "wysiwyg": "string",
    "select": "string",
    "radio": "string",
    "url": "string",
    "link": "string",
    "email": "string",
    "color": "string",
    "date": "string",
    "number": "number",
    "range": "number",
    "toggle": "boolean",
    "checkbox": "boolean",
    "image": "object",
    "media": "object",
    "file": "object",
    "gallery": "array",
    "repeater": "array",
    "list": "array",
}

# Definition keys copied verbatim when present
_PASSTHROUGH_KEYS = ("default", "enum", "source", "selector", "attribute", "role")


def _iter_definitions(decoded: Any) -> Iterator[Tuple[str, Dict[str, Any]]]:
    if isinstance(decoded, dict):
        for name, definition in decoded.items():
            yield str(name), definition if isinstance(definition, dict) else {}
    elif isinstance(decoded, list):
        for definition in decoded:
            if isinstance(definition, dict) and definition.get("name"):
                yield str(definition["name"]), definition


def map_attribute_type(control_type: Any) -> str:
    key = str(control_type or "").strip().lower()
    if key in JSON_TYPES:
        return key
    return CONTROL_TYPES.get(key, "string")


def build_attribute_schema(raw: str) -> Dict[str, Dict[str, Any]]:
    """Schema for a raw attributes field; empty for blank or invalid JSON."""
    if not raw or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError as e:
        logger.warning("Ignoring invalid attribute definitions: %s", e)
        return {}

    schema: Dict[str, Dict[str, Any]] = {}
    for name, definition in _iter_definitions(decoded):
        entry: Dict[str, Any] = {"type": map_attribute_type(definition.get("type"))}
        for key in _PASSTHROUGH_KEYS:
            if key in definition:
                entry[key] = definition[key]
        schema[name] = entry
    return schema


class AttributeSchemaMapper:
    """Reads a record's attribute definitions and maps them."""

    def __init__(self, store: ContentStore):
        self.store = store

    async def schema_for(self, record_id: int) -> Dict[str, Dict[str, Any]]:
        raw = await self.store.get_field(record_id, FieldKey.ATTRIBUTES_SCHEMA)
        return build_attribute_schema(raw)
