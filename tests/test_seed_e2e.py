from __future__ import annotations

import pytest

from partition_bench.enums import TableRole
from partition_bench.executor import EngineExecutor
from partition_bench.seed import Seeder, SeedTarget, build_seed_plan, run_seeding, truncate_tables


async def _count(executor: EngineExecutor, table: str) -> int:
    rows = await executor.query(f'SELECT COUNT(*) FROM {table}')
    return int(rows[0][0])


@pytest.mark.asyncio
async def test_seed_authors_then_books(sqlite_executor: EngineExecutor) -> None:
    """
    < 4 workers seed 100 authors, then 500 books >
    1. Every generated row is inserted.
    2. Every book references one of the seeded authors.
    3. The shared counter ends at the sum of both phases.
    """
    seeder = Seeder(sqlite_executor, workers=4, batch_size=30, seed=1)
    targets = [
        SeedTarget(role=TableRole.AUTHOR, count=100),
        SeedTarget(role=TableRole.BOOK, count=500, author_count=100),
    ]

    summary = await run_seeding(seeder, targets, interval=0.05, settle=0)

    assert await _count(sqlite_executor, 'authors') == 100
    assert await _count(sqlite_executor, 'books') == 500
    rows = await sqlite_executor.query('SELECT MIN(author_id), MAX(author_id) FROM books')
    low, high = rows[0]
    assert 1 <= low <= high <= 100

    assert seeder.counter.value == 600
    assert summary.generated == 600
    assert summary.inserted == 600
    assert [p.failed_batches for p in summary.phases] == [0, 0]
    assert summary.format().startswith('Completed! Total time: ')


@pytest.mark.asyncio
async def test_association_rows_are_unique(sqlite_executor: EngineExecutor) -> None:
    """
    < 300 book_tags over 10 books x 5 tags >
    Only 50 distinct pairs exist, so the composite key plus insert-or-ignore caps the table at 50
    even though the counter still advances by every sequence index.
    """
    plan = build_seed_plan(authors=5, tags=5, books=10, book_tags=300, author_tags=0)
    seeder = Seeder(sqlite_executor, workers=3, batch_size=20, seed=2)

    summary = await run_seeding(seeder, plan, interval=0.05, settle=0)

    assert await _count(sqlite_executor, 'book_tags') <= 50
    rows = await sqlite_executor.query(
        'SELECT COUNT(*) FROM (SELECT book_id, tag_id FROM book_tags GROUP BY book_id, tag_id HAVING COUNT(*) > 1)'
    )
    assert rows[0][0] == 0
    assert summary.generated == 5 + 5 + 10 + 300


@pytest.mark.asyncio
async def test_truncate_empties_every_table(sqlite_executor: EngineExecutor) -> None:
    plan = build_seed_plan(authors=3, tags=3, books=6, book_tags=6, author_tags=3)
    await run_seeding(Seeder(sqlite_executor, workers=2, seed=3), plan, interval=0.05, settle=0)

    await truncate_tables(sqlite_executor)

    for table in ('authors', 'tags', 'books', 'book_tags', 'author_tags'):
        assert await _count(sqlite_executor, table) == 0
