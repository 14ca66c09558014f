from __future__ import annotations

import asyncio

import pytest

from partition_bench.seed.pool import run_workers, split_ranges


@pytest.mark.parametrize(
    ('total', 'workers'),
    [(1, 1), (10, 3), (100, 4), (7, 8), (1_000_003, 8), (0, 2), (5, 5)],
)
def test_split_ranges_cover_total_contiguously(total: int, workers: int) -> None:
    """
    < Ranges partition [0, total) >
    1. Exactly `workers` ranges.
    2. Sizes add up to `total`.
    3. Each range starts where the previous one stopped (ordered, disjoint, contiguous).
    """
    ranges = split_ranges(total, workers)

    assert len(ranges) == workers
    assert sum(len(r) for r in ranges) == total
    assert ranges[0].start == 0
    assert ranges[-1].stop == total
    for prev, cur in zip(ranges, ranges[1:]):
        assert prev.stop == cur.start


def test_last_range_absorbs_remainder() -> None:
    ranges = split_ranges(10, 3)
    assert [len(r) for r in ranges] == [3, 3, 4]


@pytest.mark.parametrize(('total', 'workers'), [(-1, 2), (10, 0)])
def test_split_ranges_rejects_invalid_input(total: int, workers: int) -> None:
    with pytest.raises(ValueError):
        split_ranges(total, workers)


@pytest.mark.asyncio
async def test_run_workers_runs_concurrently_and_joins() -> None:
    """
    < Every worker runs, in parallel, and run_workers waits for all of them >
    1. Each worker waits on a shared barrier that opens only when all have started.
    2. If workers ran sequentially the first one would never get past the barrier.
    """
    workers = 4
    started = 0
    all_started = asyncio.Event()

    async def work(worker_id: int, indices: range) -> tuple[int, int]:
        nonlocal started
        started += 1
        if started == workers:
            all_started.set()
        await asyncio.wait_for(all_started.wait(), timeout=5)
        return worker_id, len(indices)

    results = await run_workers(10, workers, work)

    assert results == [(0, 2), (1, 2), (2, 2), (3, 4)]
