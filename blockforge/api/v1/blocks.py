"""
Block endpoints: settings and artifact generation.
"""

from fastapi import APIRouter

from blockforge.api.deps import DbSession, Pipeline, Tracker, require_record
from blockforge.kernel.models.content import ContentType
from blockforge.schemas.common import ErrorResponse
from blockforge.kernel.storage import BlockSettingsRepository
from blockforge.schemas.block_settings import BlockSettings, BlockSettingsUpdate
from blockforge.schemas.generation import GenerationReport

router = APIRouter(responses={404: {"model": ErrorResponse}})


@router.get("/{block_id}/settings", response_model=BlockSettings)
async def get_block_settings(block_id: int, db: DbSession):
    """Stored settings of a block (defaults when never saved)."""
    await require_record(db, block_id, ContentType.BLOCK)
    settings = await BlockSettingsRepository(db).get(block_id)
    return settings or BlockSettings(block_id=block_id)


@router.put("/{block_id}/settings", response_model=BlockSettings)
async def update_block_settings(
    block_id: int,
    data: BlockSettingsUpdate,
    db: DbSession,
    tracker: Tracker,
):
    """
    Save block settings.

    Only fields sent in the body are changed. Partial usage is refreshed
    so dependency lookups see the new selection.
    """
    await require_record(db, block_id, ContentType.BLOCK)
    return await tracker.save_block_settings(block_id, data.model_dump(exclude_unset=True))


@router.post("/{block_id}/generate", response_model=GenerationReport)
async def generate_block(block_id: int, db: DbSession, pipeline: Pipeline):
    """Write every artifact of a block."""
    await require_record(db, block_id, ContentType.BLOCK)
    return await pipeline.generate(block_id)
