"""
SCSS partial dependency tracking.

A block's compiled stylesheet includes its locally selected partials plus
every global partial. The partial_usage table materializes those pairs
so "which blocks must recompile when partial P changes" is a lookup.
"""

from typing import Any, Iterable, List, Mapping, Optional, Set

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.config import Settings, get_settings
from blockforge.kernel.models.content import ContentType
from blockforge.kernel.models.settings import PartialUsage
from blockforge.kernel.storage import BlockSettingsRepository, ContentStore, PartialSettingsRepository
from blockforge.logging_config import get_logger
from blockforge.schemas.block_settings import BlockSettings
from blockforge.schemas.partials import PartialSettings

logger = get_logger(__name__)


class PartialUsageTracker:
    """
    Maintains the partial_usage relation and answers dependency queries.

    Usage:
        tracker = PartialUsageTracker(session)
        await tracker.save_block_settings(block_id, {"selected_partials": [3, 5]})
        block_ids = await tracker.affected_blocks(partial_id=3)
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.session = session
        self.store = ContentStore(session)
        self.block_settings = BlockSettingsRepository(
            session, use_json_query=settings.json_membership_query_enabled
        )
        self.partial_settings = PartialSettingsRepository(session)

    async def _usage_for_partial(self, partial_id: int) -> Set[int]:
        result = await self.session.execute(
            select(PartialUsage.block_id).where(PartialUsage.partial_id == partial_id)
        )
        return set(result.scalars().all())

    async def _replace_rows(self, column, key: int, pairs: Iterable[tuple]) -> None:
        await self.session.execute(delete(PartialUsage).where(column == key))
        self.session.add_all(PartialUsage(block_id=b, partial_id=p) for b, p in pairs)
        await self.session.flush()

    async def refresh_block(self, block_id: int) -> Set[int]:
        """Recompute a block's usage rows. Returns the partial ids it now uses."""
        block_settings = await self.block_settings.get(block_id)
        local = block_settings.selected_partials if block_settings else []
        global_ids = await self.partial_settings.list_global_ids()

        existing = set(await self._existing_ids(global_ids + list(local), ContentType.PARTIAL))
        partial_ids = {pid for pid in global_ids + list(local) if pid in existing}

        await self._replace_rows(PartialUsage.block_id, block_id, ((block_id, pid) for pid in sorted(partial_ids)))
        logger.debug("Refreshed partial usage for block %s: %s", block_id, sorted(partial_ids))
        return partial_ids

    async def refresh_partial(self, partial_id: int) -> Set[int]:
        """Recompute a partial's usage rows. Returns the block ids that now use it."""
        scope = await self.partial_settings.get(partial_id)
        if scope.is_global:
            block_ids = set(await self.store.list_ids(ContentType.BLOCK))
        else:
            block_ids = await self.block_settings.blocks_using_partial(partial_id)
            block_ids = set(await self._existing_ids(block_ids, ContentType.BLOCK))

        await self._replace_rows(
            PartialUsage.partial_id, partial_id, ((bid, partial_id) for bid in sorted(block_ids))
        )
        logger.debug(
            "Refreshed partial usage for partial %s (global=%s): %d blocks",
            partial_id, scope.is_global, len(block_ids),
        )
        return block_ids

    async def affected_blocks(self, partial_id: int) -> Set[int]:
        """
        Blocks to recompile after `partial_id` changes.

        A global partial affects every block; a local one affects the
        blocks recorded in the usage relation.
        """
        scope = await self.partial_settings.get(partial_id)
        if scope.is_global:
            return set(await self.store.list_ids(ContentType.BLOCK))
        return await self._usage_for_partial(partial_id)

    async def compilation_order(self, block_id: int) -> List[int]:
        """
        Partial ids in the order the compiler should concatenate them.

        Globals first (by global_order, then id), then the block's own
        selection in the order it was saved. Each id appears once.
        """
        ordered = list(await self.partial_settings.list_global_ids())
        block_settings = await self.block_settings.get(block_id)
        for pid in (block_settings.selected_partials if block_settings else []):
            if pid not in ordered:
                ordered.append(pid)
        return ordered

    async def save_block_settings(self, block_id: int, changes: Mapping[str, Any]) -> BlockSettings:
        saved = await self.block_settings.save(block_id, changes)
        await self.refresh_block(block_id)
        return saved

    async def set_partial_scope(
        self,
        partial_id: int,
        is_global: bool,
        global_order: Optional[int] = None,
    ) -> PartialSettings:
        scope = await self.partial_settings.save(partial_id, is_global, global_order)
        await self.refresh_partial(partial_id)
        return scope

    async def forget_block(self, block_id: int) -> None:
        await self.session.execute(delete(PartialUsage).where(PartialUsage.block_id == block_id))
        await self.block_settings.delete(block_id)

    async def forget_partial(self, partial_id: int) -> None:
        await self.session.execute(delete(PartialUsage).where(PartialUsage.partial_id == partial_id))
        await self.partial_settings.delete(partial_id)

    async def _existing_ids(self, ids: Iterable[int], content_type: ContentType) -> List[int]:
        wanted = set(ids)
        if not wanted:
            return []
        return [i for i in await self.store.list_ids(content_type) if i in wanted]
