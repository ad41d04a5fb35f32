"""
SCSS partial schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class PartialSettings(BaseModel):
    """Scope of a partial."""

    partial_id: int
    is_global: bool = False
    global_order: int = 0


class PartialScopeUpdate(BaseModel):
    """Toggle a partial between global and local."""

    is_global: bool
    global_order: Optional[int] = Field(None, description="Position among global partials (lower first)")


class AffectedBlocksResponse(BaseModel):
    """Blocks that must regenerate after a partial change."""

    partial_id: int
    is_global: bool
    block_ids: List[int]
