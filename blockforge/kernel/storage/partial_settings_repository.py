"""
Repository for SCSS partial scope (global/local and global ordering).
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.kernel.models.settings import PartialSettingsRow
from blockforge.schemas.partials import PartialSettings


class PartialSettingsRepository:
    """Async access to partial_settings rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, partial_id: int) -> PartialSettings:
        """Stored scope, or the local default when the partial has none."""
        row = await self.session.get(PartialSettingsRow, partial_id)
        if row is None:
            return PartialSettings(partial_id=partial_id)
        return PartialSettings(
            partial_id=row.partial_id,
            is_global=bool(row.is_global),
            global_order=row.global_order or 0,
        )

    async def save(
        self,
        partial_id: int,
        is_global: bool,
        global_order: Optional[int] = None,
    ) -> PartialSettings:
        row = await self.session.get(PartialSettingsRow, partial_id)
        if row is None:
            row = PartialSettingsRow(partial_id=partial_id, is_global=False, global_order=0)
            self.session.add(row)

        row.is_global = bool(is_global)
        if global_order is not None:
            row.global_order = int(global_order)

        await self.session.flush()
        return PartialSettings(
            partial_id=row.partial_id,
            is_global=row.is_global,
            global_order=row.global_order,
        )

    async def list_global_ids(self) -> List[int]:
        """Global partials ordered by global_order, then id."""
        query = (
            select(PartialSettingsRow.partial_id)
            .where(PartialSettingsRow.is_global.is_(True))
            .order_by(PartialSettingsRow.global_order, PartialSettingsRow.partial_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete(self, partial_id: int) -> bool:
        result = await self.session.execute(
            delete(PartialSettingsRow).where(PartialSettingsRow.partial_id == partial_id)
        )
        await self.session.flush()
        return result.rowcount > 0
