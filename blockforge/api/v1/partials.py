"""
SCSS partial endpoints: scope and dependent blocks.
"""

from typing import List

from fastapi import APIRouter

from blockforge.api.deps import DbSession, Pipeline, Tracker, require_record
from blockforge.kernel.models.content import ContentType
from blockforge.schemas.common import ErrorResponse
from blockforge.schemas.generation import GenerationReport
from blockforge.schemas.partials import AffectedBlocksResponse, PartialScopeUpdate, PartialSettings

router = APIRouter(responses={404: {"model": ErrorResponse}})


@router.put("/{partial_id}/scope", response_model=PartialSettings)
async def set_partial_scope(
    partial_id: int,
    data: PartialScopeUpdate,
    db: DbSession,
    tracker: Tracker,
):
    """Make a partial global or local."""
    await require_record(db, partial_id, ContentType.PARTIAL)
    return await tracker.set_partial_scope(partial_id, data.is_global, data.global_order)


@router.get("/{partial_id}/affected-blocks", response_model=AffectedBlocksResponse)
async def get_affected_blocks(partial_id: int, db: DbSession, tracker: Tracker):
    """Blocks whose styles include this partial."""
    await require_record(db, partial_id, ContentType.PARTIAL)
    scope = await tracker.partial_settings.get(partial_id)
    block_ids = await tracker.affected_blocks(partial_id)
    return AffectedBlocksResponse(
        partial_id=partial_id,
        is_global=scope.is_global,
        block_ids=sorted(block_ids),
    )


@router.post("/{partial_id}/regenerate", response_model=List[GenerationReport])
async def regenerate_dependents(partial_id: int, db: DbSession, pipeline: Pipeline):
    """Regenerate every block affected by a partial change."""
    await require_record(db, partial_id, ContentType.PARTIAL)
    return await pipeline.regenerate_affected(partial_id)
