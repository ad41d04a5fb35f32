"""
FastAPI dependencies for database sessions and generation services.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.config import Settings, get_settings
from blockforge.database import async_session_maker
from blockforge.engines.dependencies import PartialUsageTracker
from blockforge.engines.generators import ArtifactPipeline
from blockforge.kernel.models.content import ContentRecord, ContentType
from blockforge.kernel.storage import ContentStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_pipeline(db: DbSession, settings: AppSettings) -> ArtifactPipeline:
    return ArtifactPipeline(db, settings)


def get_tracker(db: DbSession, settings: AppSettings) -> PartialUsageTracker:
    return PartialUsageTracker(db, settings)


Pipeline = Annotated[ArtifactPipeline, Depends(get_pipeline)]
Tracker = Annotated[PartialUsageTracker, Depends(get_tracker)]


async def require_record(db: AsyncSession, record_id: int, content_type: ContentType) -> ContentRecord:
    """Load a record of the given type or raise 404."""
    record = await ContentStore(db).get_record(record_id)
    if record is None or record.content_type != content_type.value:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{content_type.value.capitalize()} {record_id} not found",
        )
    return record
