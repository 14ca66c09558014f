from collections.abc import AsyncIterator
from pathlib import Path

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from partition_bench.enums import DBKind
from partition_bench.executor import EngineExecutor
from partition_bench.models import create_tables
from partition_bench.settings import DBSettings, create_engine


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """
    File-backed sqlite database with the book schema already created.
    A file (not :memory:) so that every pooled connection sees the same data.
    """
    settings = DBSettings(kind=DBKind.SQLITE, sqlite_path=str(tmp_path / 'bookdb.sqlite3'))
    engine = create_engine(settings, workers=4)
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_executor(sqlite_engine: AsyncEngine) -> EngineExecutor:
    return EngineExecutor(sqlite_engine)
