"""
Content store - read access to records and their fields.
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.kernel.models.content import ContentField, ContentRecord, ContentType, FieldKey
from blockforge.kernel.models.settings import BlockSettingsRow, PartialSettingsRow, PartialUsage
from blockforge.logging_config import get_logger

logger = get_logger(__name__)


def _key(field_key) -> str:
    return field_key.value if isinstance(field_key, FieldKey) else str(field_key)


class ContentStore:
    """
    Repository for content records.

    Usage:
        store = ContentStore(session)
        template = await store.get_field(block_id, FieldKey.RENDER_TEMPLATE)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, record_id: int) -> Optional[ContentRecord]:
        return await self.session.get(ContentRecord, record_id)

    async def get_field(self, record_id: int, field_key) -> str:
        """Raw field text, or an empty string when the field is absent."""
        query = select(ContentField.value).where(
            ContentField.record_id == record_id,
            ContentField.field_key == _key(field_key),
        )
        result = await self.session.execute(query)
        value = result.scalar_one_or_none()
        return value or ""

    async def list_ids(self, content_type: ContentType) -> List[int]:
        query = (
            select(ContentRecord.id)
            .where(ContentRecord.content_type == content_type.value)
            .order_by(ContentRecord.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_record(
        self,
        title: str,
        slug: str,
        content_type: ContentType,
        fields: Optional[dict] = None,
    ) -> ContentRecord:
        record = ContentRecord(title=title, slug=slug, content_type=content_type.value)
        self.session.add(record)
        await self.session.flush()
        for key, value in (fields or {}).items():
            await self.set_field(record.id, key, value)
        return record

    async def set_field(self, record_id: int, field_key, value: str) -> None:
        """Apply a field value (insert or update)."""
        query = select(ContentField).where(
            ContentField.record_id == record_id,
            ContentField.field_key == _key(field_key),
        )
        result = await self.session.execute(query)
        field = result.scalar_one_or_none()
        if field is None:
            self.session.add(ContentField(record_id=record_id, field_key=_key(field_key), value=value or ""))
        else:
            field.value = value or ""
        await self.session.flush()

    async def delete_record(self, record_id: int) -> bool:
        """
        Delete a record together with its settings and usage rows.

        Returns False when the record does not exist.
        """
        record = await self.get_record(record_id)
        if record is None:
            return False

        await self.session.execute(delete(PartialUsage).where(
            (PartialUsage.block_id == record_id) | (PartialUsage.partial_id == record_id)
        ))
        await self.session.execute(delete(BlockSettingsRow).where(BlockSettingsRow.block_id == record_id))
        await self.session.execute(delete(PartialSettingsRow).where(PartialSettingsRow.partial_id == record_id))
        await self.session.execute(delete(ContentField).where(ContentField.record_id == record_id))
        await self.session.execute(delete(ContentRecord).where(ContentRecord.id == record_id))
        await self.session.flush()
        logger.info("Deleted content record", extra={"deleted_record": record_id})
        return True
