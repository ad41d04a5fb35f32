"""
Block settings schemas.
"""

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

# Characters trimmed around string ids; the JSON membership queries trim the same set
ID_WHITESPACE = " \t\n\v\f\r"
_DIGITS = re.compile(r"[0-9]+")


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name}")


def decode_partial_ids(value: Any) -> List[int]:
    """
    Normalize a stored or submitted partial selection to a list of ids.

    Accepts a JSON string or a list. Invalid JSON, non-list payloads and
    entries that are not integral ids are dropped, so the result is always
    a list. Duplicates keep their first position.
    """
    if value is None or value == "":
        return []
    if isinstance(value, (bytes, str)):
        try:
            value = json.loads(value, parse_constant=_reject_constant)
        except ValueError:
            return []
    if not isinstance(value, (list, tuple)):
        return []

    ids: List[int] = []
    for item in value:
        if isinstance(item, bool):
            continue
        if isinstance(item, int):
            partial_id = item
        elif isinstance(item, str) and _DIGITS.fullmatch(item.strip(ID_WHITESPACE)):
            partial_id = int(item.strip(ID_WHITESPACE))
        else:
            continue
        if partial_id > 0 and partial_id not in ids:
            ids.append(partial_id)
    return ids


def split_csv(value: Any) -> List[str]:
    """Comma-separated column (or list) to a list of non-empty entries."""
    if not value:
        return []
    items = value if isinstance(value, (list, tuple)) else str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


class BlockSettings(BaseModel):
    """Materialized settings of one block."""

    block_id: int
    category: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    supports_inner_blocks: bool = False
    allowed_block_types: List[str] = Field(default_factory=list)
    template: List[str] = Field(default_factory=list)
    template_lock: Optional[str] = None
    selected_partials: List[int] = Field(default_factory=list)
    editor_selected_partials: List[int] = Field(default_factory=list)
    supports: Optional[Dict[str, Any]] = None
    view_script_module: bool = False

    @field_validator("selected_partials", "editor_selected_partials", mode="before")
    @classmethod
    def _normalize_partials(cls, value: Any) -> List[int]:
        return decode_partial_ids(value)

    @field_validator("allowed_block_types", "template", mode="before")
    @classmethod
    def _normalize_lists(cls, value: Any) -> List[str]:
        return split_csv(value)


class BlockSettingsUpdate(BaseModel):
    """
    Partial settings update.

    Only fields present in the request are written; absent fields keep
    their stored values.
    """

    category: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    supports_inner_blocks: Optional[bool] = None
    allowed_block_types: Optional[List[str]] = None
    template: Optional[List[str]] = None
    template_lock: Optional[str] = None
    selected_partials: Optional[List[int]] = None
    editor_selected_partials: Optional[List[int]] = None
    supports: Optional[Dict[str, Any]] = None
    view_script_module: Optional[bool] = None
