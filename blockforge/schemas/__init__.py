"""
Pydantic schemas for settings, reports and API request/response validation.
"""

from blockforge.schemas.block_settings import (
    BlockSettings,
    BlockSettingsUpdate,
    decode_partial_ids,
    split_csv,
)
from blockforge.schemas.partials import (
    PartialSettings,
    PartialScopeUpdate,
    AffectedBlocksResponse,
)
from blockforge.schemas.generation import GenerationReport
from blockforge.schemas.common import ErrorResponse, HealthResponse

__all__ = [
    # Block settings
    "BlockSettings",
    "BlockSettingsUpdate",
    "decode_partial_ids",
    "split_csv",
    # Partials
    "PartialSettings",
    "PartialScopeUpdate",
    "AffectedBlocksResponse",
    # Generation
    "GenerationReport",
    # Common
    "ErrorResponse",
    "HealthResponse",
]
