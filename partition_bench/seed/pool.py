from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Final, TypeVar

T = TypeVar('T')

DEFAULT_WORKERS: Final[int] = 8


def split_ranges(total: int, workers: int) -> list[range]:
    """
    < Split [0, total) into `workers` contiguous ranges >
    1. Every worker gets total // workers indices.
    2. The last worker also absorbs the remainder.
    3. Ranges are ordered and never overlap, so workers never generate the same index.
    """
    if total < 0:
        raise ValueError('total must be >= 0.')
    if workers < 1:
        raise ValueError('workers must be >= 1.')

    per_worker = total // workers
    ranges: list[range] = []
    for w in range(workers):
        start = w * per_worker
        end = total if w == workers - 1 else start + per_worker
        ranges.append(range(start, end))
    return ranges


async def run_workers(
    total: int,
    workers: int,
    work: Callable[[int, range], Awaitable[T]],
) -> list[T]:
    """Run work(worker_id, indices) for every range concurrently and return once all of them finished."""
    ranges = split_ranges(total, workers)
    return list(await asyncio.gather(*(work(w, indices) for w, indices in enumerate(ranges))))
