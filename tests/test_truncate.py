from __future__ import annotations

import pytest

from partition_bench.enums import DBKind
from partition_bench.models import TRUNCATE_ORDER
from partition_bench.seed import truncate_tables

from .fakes import FakeExecutor, db_error


@pytest.mark.asyncio
async def test_postgres_truncates_every_table_in_one_statement() -> None:
    """
    < postgres only truncates a referenced table together with the tables referencing it >
    1. One statement lists every table.
    2. RESTART IDENTITY puts the id sequences back to 1, so foreign keys drawn from [1, count] stay valid.
    """
    executor = FakeExecutor(DBKind.POSTGRES)

    await truncate_tables(executor)

    assert executor.executed == [
        ('TRUNCATE TABLE book_tags, author_tags, books, tags, authors RESTART IDENTITY', []),
    ]
    assert executor.scripts == []


@pytest.mark.asyncio
async def test_mysql_truncates_on_one_connection_without_fk_checks() -> None:
    executor = FakeExecutor(DBKind.MYSQL)

    await truncate_tables(executor)

    assert executor.executed == []
    ((statements, always),) = executor.scripts
    assert statements[0] == 'SET FOREIGN_KEY_CHECKS = 0'
    assert statements[1:] == [f'TRUNCATE TABLE {table}' for table in TRUNCATE_ORDER]
    assert always == ['SET FOREIGN_KEY_CHECKS = 1']


@pytest.mark.asyncio
async def test_sqlite_deletes_child_tables_first() -> None:
    executor = FakeExecutor(DBKind.SQLITE, execute_errors=[None, db_error('locked')])

    await truncate_tables(executor)

    assert [sql for sql, _ in executor.executed] == [f'DELETE FROM {table}' for table in TRUNCATE_ORDER]


@pytest.mark.asyncio
async def test_truncate_failure_is_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    executor = FakeExecutor(DBKind.MYSQL, execute_errors=[db_error('access denied')])

    await truncate_tables(executor)

    assert 'Failed to truncate' in caplog.text
    assert 'access denied' in caplog.text
