"""Integration tests for settings repositories and partial dependency tracking."""

import pytest
from sqlalchemy import select, text

from blockforge.engines.dependencies import PartialUsageTracker
from blockforge.kernel.models import BlockSettingsRow, PartialUsage
from blockforge.kernel.storage import BlockSettingsRepository, PartialSettingsRepository
from blockforge.kernel.storage import block_settings_repository


@pytest.fixture
def repo(db_session) -> BlockSettingsRepository:
    return BlockSettingsRepository(db_session)


@pytest.fixture
def tracker(db_session, app_settings) -> PartialUsageTracker:
    return PartialUsageTracker(db_session, app_settings)


class TestBlockSettingsRepository:
    """Tests for BlockSettingsRepository."""

    async def test_save_is_partial_update(self, repo, make_block):
        block = await make_block()
        await repo.save(block.id, {"category": "layout", "icon": "star", "selected_partials": [4]})
        await repo.save(block.id, {"icon": "heart", "unknown_key": "ignored"})

        settings = await repo.get(block.id)
        assert settings.category == "layout"
        assert settings.icon == "heart"
        assert settings.selected_partials == [4]

    async def test_get_missing(self, repo):
        assert await repo.get(123) is None

    async def test_partial_lists_normalized(self, repo, make_block, db_session):
        block = await make_block()
        saved = await repo.save(block.id, {
            "selected_partials": ["3", 5, "x", 5, True, -1],
            "editor_selected_partials": "[7, 8]",
            "allowed_block_types": ["core/paragraph", " core/image "],
            "template": "core/heading, core/paragraph",
        })

        assert saved.selected_partials == [3, 5]
        assert saved.editor_selected_partials == [7, 8]
        assert saved.allowed_block_types == ["core/paragraph", "core/image"]
        assert saved.template == ["core/heading", "core/paragraph"]

        row = await db_session.get(BlockSettingsRow, block.id)
        assert row.selected_partials == "[3, 5]"
        assert row.allowed_block_types == "core/paragraph,core/image"

    async def test_invalid_stored_json_reads_as_empty(self, repo, make_block, db_session):
        block = await make_block()
        await repo.save(block.id, {"category": "text"})
        row = await db_session.get(BlockSettingsRow, block.id)
        row.selected_partials = "{not json"
        row.editor_selected_partials = None
        await db_session.flush()

        settings = await repo.get(block.id)
        assert settings.selected_partials == []
        assert settings.editor_selected_partials == []

    async def test_get_bulk_and_all(self, repo, make_block):
        first = await make_block("One")
        second = await make_block("Two")
        await repo.save(first.id, {"icon": "a"})
        await repo.save(second.id, {"icon": "b"})

        bulk = await repo.get_bulk([second.id, 999])
        assert list(bulk) == [second.id]
        assert [s.icon for s in await repo.get_all()] == ["a", "b"]

    async def test_delete(self, repo, make_block):
        block = await make_block()
        await repo.save(block.id, {"icon": "a"})
        assert await repo.delete(block.id)
        assert await repo.get(block.id) is None
        assert not await repo.delete(block.id)


class TestBlocksUsingPartial:
    """The structured JSON query and its scan fallback must agree."""

    async def _seed(self, repo, make_block, make_partial):
        colors = await make_partial("Colors")
        spacing = await make_partial("Spacing")
        a = await make_block("A")
        b = await make_block("B")
        c = await make_block("C")
        await repo.save(a.id, {"selected_partials": [colors.id, spacing.id]})
        await repo.save(b.id, {"selected_partials": [spacing.id]})
        await repo.save(c.id, {"category": "no-partials"})
        return colors, spacing, a, b, c

    async def test_json_query(self, repo, make_block, make_partial):
        colors, spacing, a, b, _ = await self._seed(repo, make_block, make_partial)
        assert await repo.blocks_using_partial(colors.id) == {a.id}
        assert await repo.blocks_using_partial(spacing.id) == {a.id, b.id}
        assert await repo.blocks_using_partial(9999) == set()

    async def test_fallback_on_database_error(self, repo, make_block, make_partial, monkeypatch, caplog):
        colors, spacing, a, b, _ = await self._seed(repo, make_block, make_partial)
        expected = {
            colors.id: await repo.blocks_using_partial(colors.id),
            spacing.id: await repo.blocks_using_partial(spacing.id),
        }

        # SQLite has no JSON_CONTAINS, so the query fails and the scan runs
        monkeypatch.setitem(
            block_settings_repository._JSON_MEMBERSHIP_SQL,
            "sqlite",
            "JSON_CONTAINS(block_settings.selected_partials, :partial_id, '$')",
        )
        for partial_id, blocks in expected.items():
            assert await repo.blocks_using_partial(partial_id) == blocks
        assert "JSON membership query failed" in caplog.text

    @pytest.mark.parametrize(
        "stored, expected",
        [
            ('["5"]', {5}),
            ('[" 7\\t", 7.0, 8.5]', {7}),
            ("[true, false, null]", set()),
            ('[[5], {"id": 5}, "5x", "+5", "-5", ""]', set()),
            ('[3, "003", 4]', {3, 4}),
            ("5", set()),
            ('{"selected": [5]}', set()),
            ("not json", set()),
            ("", set()),
        ],
    )
    async def test_paths_agree_on_raw_rows(self, db_session, make_block, stored, expected, caplog):
        block = await make_block("Raw")
        block_id = block.id
        repo = BlockSettingsRepository(db_session)
        await repo.save(block_id, {"category": "raw"})
        await db_session.execute(
            text("UPDATE block_settings SET selected_partials = :stored WHERE block_id = :block_id"),
            {"stored": stored, "block_id": block_id},
        )
        db_session.expire_all()
        scanning = BlockSettingsRepository(db_session, use_json_query=False)

        decoded = set((await repo.get(block_id)).selected_partials)
        assert decoded == expected
        for partial_id in range(-1, 10):
            indexed = await repo.blocks_using_partial(partial_id)
            scanned = await scanning.blocks_using_partial(partial_id)
            assert indexed == scanned, partial_id
            assert (block_id in indexed) == (partial_id in expected)
        # Every lookup ran the JSON query itself
        assert "JSON membership query failed" not in caplog.text

    async def test_fallback_when_disabled(self, db_session, make_block, make_partial):
        repo = BlockSettingsRepository(db_session)
        colors, spacing, a, b, _ = await self._seed(repo, make_block, make_partial)

        scanning = BlockSettingsRepository(db_session, use_json_query=False)
        assert await scanning.blocks_using_partial(spacing.id) == {a.id, b.id}


class TestPartialSettingsRepository:
    """Tests for PartialSettingsRepository."""

    async def test_defaults_and_global_ordering(self, db_session, make_partial):
        repo = PartialSettingsRepository(db_session)
        first = await make_partial("First")
        second = await make_partial("Second")
        third = await make_partial("Third")

        assert (await repo.get(first.id)).is_global is False

        await repo.save(third.id, True, 0)
        await repo.save(first.id, True, 5)
        await repo.save(second.id, True, 0)
        assert await repo.list_global_ids() == [second.id, third.id, first.id]

        await repo.save(third.id, False)
        scope = await repo.get(third.id)
        assert scope.is_global is False
        assert scope.global_order == 0
        assert await repo.list_global_ids() == [second.id, first.id]


class TestPartialUsageTracker:
    """Tests for PartialUsageTracker."""

    async def _usage(self, db_session):
        result = await db_session.execute(select(PartialUsage.block_id, PartialUsage.partial_id))
        return set(result.all())

    async def test_local_partial_affects_selecting_blocks(self, tracker, make_block, make_partial, db_session):
        colors = await make_partial("Colors")
        a = await make_block("A")
        b = await make_block("B")

        await tracker.save_block_settings(a.id, {"selected_partials": [colors.id]})
        await tracker.save_block_settings(b.id, {"category": "text"})

        assert await tracker.affected_blocks(colors.id) == {a.id}
        assert await self._usage(db_session) == {(a.id, colors.id)}

    async def test_global_partial_fans_out(self, tracker, make_block, make_partial, db_session):
        reset = await make_partial("Reset")
        blocks = [await make_block(name) for name in ("A", "B", "C")]

        await tracker.set_partial_scope(reset.id, True, 1)

        assert await tracker.affected_blocks(reset.id) == {blk.id for blk in blocks}
        assert await self._usage(db_session) == {(blk.id, reset.id) for blk in blocks}

        # Blocks created later are affected through the global flag
        late = await make_block("Late")
        assert late.id in await tracker.affected_blocks(reset.id)

    async def test_toggle_back_to_local(self, tracker, make_block, make_partial, db_session):
        reset = await make_partial("Reset")
        a = await make_block("A")
        b = await make_block("B")
        await tracker.save_block_settings(b.id, {"selected_partials": [reset.id]})

        await tracker.set_partial_scope(reset.id, True)
        await tracker.set_partial_scope(reset.id, False)

        assert await tracker.affected_blocks(reset.id) == {b.id}
        assert await self._usage(db_session) == {(b.id, reset.id)}
        assert a.id not in await tracker.affected_blocks(reset.id)

    async def test_refresh_block_includes_globals(self, tracker, make_block, make_partial):
        base = await make_partial("Base")
        local = await make_partial("Local")
        a = await make_block("A")
        await tracker.set_partial_scope(base.id, True)

        used = await tracker.save_block_settings(a.id, {"selected_partials": [local.id, 4242]})

        assert used.selected_partials == [local.id, 4242]
        assert await tracker.refresh_block(a.id) == {base.id, local.id}

    async def test_compilation_order(self, tracker, make_block, make_partial):
        late = await make_partial("Late Global")
        early = await make_partial("Early Global")
        local = await make_partial("Local")
        a = await make_block("A")

        await tracker.set_partial_scope(late.id, True, 10)
        await tracker.set_partial_scope(early.id, True, 1)
        await tracker.save_block_settings(a.id, {"selected_partials": [local.id, late.id]})

        assert await tracker.compilation_order(a.id) == [early.id, late.id, local.id]

    async def test_forget_block_and_partial(self, tracker, make_block, make_partial, db_session):
        colors = await make_partial("Colors")
        a = await make_block("A")
        await tracker.save_block_settings(a.id, {"selected_partials": [colors.id]})

        await tracker.forget_partial(colors.id)
        assert await self._usage(db_session) == set()

        await tracker.forget_block(a.id)
        assert await tracker.block_settings.get(a.id) is None

    async def test_deleting_record_cleans_relations(self, tracker, store, make_block, make_partial, db_session):
        colors = await make_partial("Colors")
        a = await make_block("A")
        await tracker.save_block_settings(a.id, {"selected_partials": [colors.id]})

        assert await store.delete_record(a.id)

        assert await self._usage(db_session) == set()
        assert await tracker.block_settings.get(a.id) is None
        assert await store.get_record(a.id) is None
