from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class LatencyStats:
    """Reduction of one query's durations, in seconds. `count == 0` means no valid measurement."""

    count: int
    total: float
    min: float
    max: float
    mean: float
    median: float
    p95: float

    @property
    def is_valid(self) -> bool:
        return self.count > 0


EMPTY_STATS = LatencyStats(count=0, total=0.0, min=0.0, max=0.0, mean=0.0, median=0.0, p95=0.0)


def percentile_index(n: int, q: float) -> int:
    """floor(n * q) into a sorted sequence of length n, clamped to the last index."""
    if n < 1:
        raise ValueError('percentile of an empty sequence is undefined.')
    return min(int(n * q), n - 1)


def summarize(durations: Sequence[float]) -> LatencyStats:
    if not durations:
        return EMPTY_STATS

    n = len(durations)
    total = sum(durations)
    ordered = sorted(durations)

    return LatencyStats(
        count=n,
        total=total,
        min=ordered[0],
        max=ordered[-1],
        mean=statistics.mean(ordered),
        median=ordered[percentile_index(n, 0.5)],
        p95=ordered[percentile_index(n, 0.95)],
    )
