"""
Pytest fixtures for Blockforge tests.
"""

from pathlib import Path
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from blockforge.config import Settings
from blockforge.database import build_engine, build_session_maker
from blockforge.kernel.models import Base, ContentType, FieldKey
from blockforge.kernel.models.content import ContentRecord
from blockforge.kernel.storage import ContentStore


@pytest.fixture
def app_settings(tmp_path: Path) -> Settings:
    """Settings writing into a temp blocks dir; only the in-process parser validates."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        blocks_dir=str(tmp_path / "blocks"),
        php_lint_enabled=False,
        php_parser_fallback_enabled=True,
    )


@pytest_asyncio.fixture(scope="function")
async def db_engine(app_settings: Settings):
    """Create a test database engine (temp SQLite file)."""
    engine = build_engine(app_settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_maker = build_session_maker(db_engine)

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session: AsyncSession) -> ContentStore:
    return ContentStore(db_session)


@pytest_asyncio.fixture
async def make_block(store: ContentStore):
    """Factory creating block records with optional fields."""

    async def _make(
        title: str = "Hero",
        slug: Optional[str] = None,
        template: str = "",
        **fields: str,
    ) -> ContentRecord:
        values = {FieldKey.RENDER_TEMPLATE: template}
        for key, value in fields.items():
            values[FieldKey(key)] = value
        return await store.create_record(
            title=title,
            slug=slug or title.lower().replace(" ", "-"),
            content_type=ContentType.BLOCK,
            fields=values,
        )

    return _make


@pytest_asyncio.fixture
async def make_partial(store: ContentStore):
    """Factory creating SCSS partial records."""

    async def _make(title: str = "Colors", source: str = "$brand: #c00;") -> ContentRecord:
        return await store.create_record(
            title=title,
            slug=title.lower().replace(" ", "-"),
            content_type=ContentType.PARTIAL,
            fields={FieldKey.PARTIAL_SOURCE: source},
        )

    return _make


@pytest.fixture
def fake_php(tmp_path: Path):
    """
    Write an executable shell script standing in for the php binary.

    The script body receives the lint arguments as "$@".
    """

    def _write(body: str, name: str = "php") -> str:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(0o755)
        return str(script)

    return _write
