"""
Repository for block settings.

Saves have partial-update semantics: keys absent from a save call keep
their stored values. Partial selections are stored as JSON arrays of
integer ids and always read back as lists.
"""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from sqlalchemy import delete, select, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.kernel.models.settings import BlockSettingsRow
from blockforge.logging_config import get_logger
from blockforge.schemas.block_settings import BlockSettings, decode_partial_ids, split_csv

logger = get_logger(__name__)

# JSON-array membership per dialect, bound to `:partial_id`. Each clause
# applies the decode_partial_ids rules: only valid JSON arrays count, and an
# entry matches when it is an integer or a string of ASCII digits (trimmed of
# ID_WHITESPACE). Booleans, reals, objects and nested arrays never match.
_SQLITE_ID_TEXT = "trim(item.value, char(32, 9, 10, 11, 12, 13))"
_PG_ID_TEXT = "btrim(item.value #>> '{}', ' ' || chr(9) || chr(10) || chr(11) || chr(12) || chr(13))"
_MYSQL_WHITESPACE = "CHAR(32, 9, 10, 11, 12, 13 USING utf8mb4)"
_MYSQL_ID_TEXT = (
    f"REGEXP_REPLACE(JSON_UNQUOTE(items.item), "
    f"CONCAT('^[', {_MYSQL_WHITESPACE}, ']+|[', {_MYSQL_WHITESPACE}, ']+$'), '')"
)
_MYSQL_MEMBERSHIP = (
    "CASE WHEN JSON_VALID(block_settings.selected_partials) THEN "
    "CASE WHEN JSON_TYPE(block_settings.selected_partials) = 'ARRAY' THEN EXISTS ("
    "SELECT 1 FROM JSON_TABLE(block_settings.selected_partials, '$[*]' "
    "COLUMNS (item JSON PATH '$')) AS items WHERE "
    "(JSON_TYPE(items.item) IN ('INTEGER', 'UNSIGNED INTEGER') "
    "AND CAST(items.item AS DECIMAL(65, 0)) = :partial_id) "
    f"OR (JSON_TYPE(items.item) = 'STRING' AND {_MYSQL_ID_TEXT} REGEXP '^[0-9]+$' "
    f"AND CAST({_MYSQL_ID_TEXT} AS DECIMAL(65, 0)) = :partial_id)"
    ") ELSE FALSE END ELSE FALSE END"
)

_JSON_MEMBERSHIP_SQL: Dict[str, str] = {
    "sqlite": (
        "CASE WHEN json_valid(block_settings.selected_partials) THEN "
        "CASE WHEN json_type(block_settings.selected_partials) = 'array' THEN EXISTS ("
        "SELECT 1 FROM json_each(block_settings.selected_partials) AS item WHERE "
        "(item.type = 'integer' AND item.value = :partial_id) "
        f"OR (item.type = 'text' AND {_SQLITE_ID_TEXT} <> '' "
        f"AND {_SQLITE_ID_TEXT} NOT GLOB '*[^0-9]*' "
        f"AND CAST({_SQLITE_ID_TEXT} AS INTEGER) = :partial_id)"
        ") ELSE 0 END ELSE 0 END"
    ),
    "postgresql": (
        "CASE WHEN jsonb_typeof(CAST(block_settings.selected_partials AS JSONB)) = 'array' THEN EXISTS ("
        "SELECT 1 FROM jsonb_array_elements(CAST(block_settings.selected_partials AS JSONB)) AS item(value) WHERE "
        "(jsonb_typeof(item.value) = 'number' AND CAST(item.value AS TEXT) ~ '^[0-9]+$' "
        "AND CAST(CAST(item.value AS TEXT) AS NUMERIC) = :partial_id) "
        f"OR (jsonb_typeof(item.value) = 'string' AND {_PG_ID_TEXT} ~ '^[0-9]+$' "
        f"AND CAST({_PG_ID_TEXT} AS NUMERIC) = :partial_id)"
        ") ELSE FALSE END"
    ),
    "mysql": _MYSQL_MEMBERSHIP,
    "mariadb": _MYSQL_MEMBERSHIP,
}

_SCALAR_FIELDS = ("category", "icon", "description", "template_lock")
_BOOL_FIELDS = ("supports_inner_blocks", "view_script_module")
_CSV_FIELDS = ("allowed_block_types", "template")
_PARTIAL_FIELDS = ("selected_partials", "editor_selected_partials")


def _encode_supports(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if not isinstance(value, dict):
        return None
    return json.dumps(value)


def _decode_supports(value: Optional[str]) -> Optional[Dict[str, Any]]:
    if not value:
        return None
    try:
        decoded = json.loads(value)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None


class BlockSettingsRepository:
    """
    Async repository over the block_settings table.

    Usage:
        repo = BlockSettingsRepository(session)
        await repo.save(block_id, {"category": "layout"})
        settings = await repo.get(block_id)
    """

    def __init__(self, session: AsyncSession, use_json_query: bool = True):
        self.session = session
        self.use_json_query = use_json_query

    @staticmethod
    def to_settings(row: BlockSettingsRow) -> BlockSettings:
        """Convert a raw row; list columns are always materialized."""
        return BlockSettings(
            block_id=row.block_id,
            category=row.category,
            icon=row.icon,
            description=row.description,
            supports_inner_blocks=bool(row.supports_inner_blocks),
            allowed_block_types=split_csv(row.allowed_block_types),
            template=split_csv(row.template),
            template_lock=row.template_lock,
            selected_partials=decode_partial_ids(row.selected_partials),
            editor_selected_partials=decode_partial_ids(row.editor_selected_partials),
            supports=_decode_supports(row.supports),
            view_script_module=bool(row.view_script_module),
        )

    async def get(self, block_id: int) -> Optional[BlockSettings]:
        row = await self.session.get(BlockSettingsRow, block_id)
        if row is None:
            return None
        return self.to_settings(row)

    async def get_bulk(self, block_ids: Iterable[int]) -> Dict[int, BlockSettings]:
        ids = sorted({int(i) for i in block_ids if int(i) > 0})
        if not ids:
            return {}
        result = await self.session.execute(
            select(BlockSettingsRow).where(BlockSettingsRow.block_id.in_(ids))
        )
        return {row.block_id: self.to_settings(row) for row in result.scalars().all()}

    async def get_all(self) -> List[BlockSettings]:
        result = await self.session.execute(
            select(BlockSettingsRow).order_by(BlockSettingsRow.block_id)
        )
        return [self.to_settings(row) for row in result.scalars().all()]

    async def save(self, block_id: int, changes: Mapping[str, Any]) -> BlockSettings:
        """
        Insert or update settings for a block.

        Only keys present in `changes` are written. Unknown keys are ignored.
        """
        row = await self.session.get(BlockSettingsRow, block_id)
        if row is None:
            row = BlockSettingsRow(block_id=block_id, supports_inner_blocks=False, view_script_module=False)
            self.session.add(row)

        for key, value in changes.items():
            if key in _SCALAR_FIELDS:
                setattr(row, key, value)
            elif key in _BOOL_FIELDS:
                setattr(row, key, bool(value))
            elif key in _CSV_FIELDS:
                setattr(row, key, ",".join(split_csv(value)) or None)
            elif key in _PARTIAL_FIELDS:
                setattr(row, key, json.dumps(decode_partial_ids(value)))
            elif key == "supports":
                row.supports = _encode_supports(value)
            else:
                logger.debug("Ignoring unknown block setting %r", key)

        await self.session.flush()
        return self.to_settings(row)

    async def delete(self, block_id: int) -> bool:
        result = await self.session.execute(
            delete(BlockSettingsRow).where(BlockSettingsRow.block_id == block_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def blocks_using_partial(self, partial_id: int) -> Set[int]:
        """
        Ids of blocks whose local selection contains `partial_id`.

        Tries a JSON-membership query first and falls back to scanning all
        rows when the database rejects it (or it is disabled/unknown for
        the dialect). Both paths return the same set.
        """
        if partial_id <= 0:
            return set()
        if self.use_json_query:
            dialect = self.session.bind.dialect.name if self.session.bind is not None else ""
            clause = _JSON_MEMBERSHIP_SQL.get(dialect)
            if clause is not None:
                try:
                    return await self._blocks_using_partial_json(clause, dialect, partial_id)
                except DBAPIError as exc:
                    logger.warning(
                        "JSON membership query failed, scanning block settings instead: %s",
                        exc.orig if exc.orig is not None else exc,
                    )
            else:
                logger.debug("No JSON membership operator for dialect %r", dialect)

        return await self._blocks_using_partial_scan(partial_id)

    async def _blocks_using_partial_json(self, clause: str, dialect: str, partial_id: int) -> Set[int]:
        query = select(BlockSettingsRow.block_id).where(
            text(clause).bindparams(partial_id=partial_id)
        )
        if dialect == "sqlite":
            result = await self.session.execute(query)
            return set(result.scalars().all())

        # A failed statement aborts the surrounding transaction on these backends
        async with self.session.begin_nested():
            result = await self.session.execute(query)
            return set(result.scalars().all())

    async def _blocks_using_partial_scan(self, partial_id: int) -> Set[int]:
        result = await self.session.execute(
            select(BlockSettingsRow.block_id, BlockSettingsRow.selected_partials)
        )
        return {
            block_id
            for block_id, selected in result.all()
            if partial_id in decode_partial_ids(selected)
        }
