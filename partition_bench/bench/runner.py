from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Final

from sqlalchemy.exc import SQLAlchemyError
from typing_extensions import Doc

from partition_bench.bench.catalog import QuerySpec
from partition_bench.bench.stats import LatencyStats, summarize
from partition_bench.enums import ParamKind
from partition_bench.executor import QueryExecutor
from partition_bench.introspection import fetch_max_id

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS: Final[int] = 10
DEFAULT_WARMUP: Final[int] = 3
RANGE_SPAN: Final[int] = 100


@dataclass(frozen=True)
class DurationSample:
    name: str
    iteration: int
    seconds: float


@dataclass(frozen=True)
class BenchmarkResult:
    name: str
    query: str
    iterations: int
    samples: tuple[DurationSample, ...]
    rows_observed: int
    last_row_count: int
    stats: LatencyStats

    @property
    def failed(self) -> Annotated[int, Doc('Timed iterations that raised and were left out of the samples.')]:
        return self.iterations - len(self.samples)


async def draw_params(
    executor: QueryExecutor,
    spec: QuerySpec,
    rng: random.Random,
    *,
    span: int = RANGE_SPAN,
) -> tuple[int, ...]:
    """
    < Draw fresh parameter values for one execution of `spec` >
    1. No-parameter queries get an empty tuple.
    2. Otherwise read the current max id of the query's id space.
    3. SINGLE draws one id in [1, max]; RANGE draws x in [1, max - span] and returns (x, x + span).
    """
    if spec.params is ParamKind.NONE or spec.id_space is None:
        return ()

    max_id = await fetch_max_id(executor, spec.id_space.value)
    if spec.params is ParamKind.SINGLE:
        return (rng.randint(1, max_id),)

    start = rng.randint(1, max(max_id - span, 1))
    return (start, start + span)


class BenchmarkRunner:
    """
    Times repeated executions of one query, strictly one at a time.

    Warmup runs are executed and drained but not recorded. A timed run that fails is
    logged and left out of the samples; it is not retried.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        iterations: int = DEFAULT_ITERATIONS,
        warmup: int = DEFAULT_WARMUP,
        rng: random.Random | None = None,
        span: int = RANGE_SPAN,
        clock: Callable[[], float] = time.perf_counter,
    ):
        if iterations < 1:
            raise ValueError('iterations must be >= 1.')
        if warmup < 0:
            raise ValueError('warmup must be >= 0.')
        self.executor = executor
        self.iterations = iterations
        self.warmup = warmup
        self.rng = rng or random.Random()
        self.span = span
        self._clock = clock

    async def _warmup(self, spec: QuerySpec) -> None:
        for _ in range(self.warmup):
            try:
                params = await draw_params(self.executor, spec, self.rng, span=self.span)
                await self.executor.query(spec.sql, params)
            except SQLAlchemyError as exc:
                logger.debug('Warmup of %r failed: %s', spec.name, exc)

    async def run(self, spec: QuerySpec, *, name: str | None = None) -> BenchmarkResult:
        label = name or spec.name
        await self._warmup(spec)

        samples: list[DurationSample] = []
        rows_observed = 0
        last_row_count = 0

        for i in range(self.iterations):
            try:
                params = await draw_params(self.executor, spec, self.rng, span=self.span)
                t0 = self._clock()
                rows = await self.executor.query(spec.sql, params)
                row_count = len(rows)
                elapsed = self._clock() - t0
            except SQLAlchemyError as exc:
                logger.warning('Error running %r (iteration %d): %s', label, i, exc)
                continue

            samples.append(DurationSample(name=label, iteration=i, seconds=elapsed))
            rows_observed += row_count
            last_row_count = row_count

        if not samples:
            logger.warning('Every iteration of %r failed; no latency figures for it.', label)

        return BenchmarkResult(
            name=label,
            query=spec.sql,
            iterations=self.iterations,
            samples=tuple(samples),
            rows_observed=rows_observed,
            last_row_count=last_row_count,
            stats=summarize([s.seconds for s in samples]),
        )
