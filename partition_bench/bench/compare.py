from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Protocol, TypeAlias

from sqlalchemy.exc import SQLAlchemyError
from typing_extensions import Doc

from partition_bench.bench.catalog import COMPARISON_PAIRS, SETUP_SCRIPTS, QueryPair
from partition_bench.bench.runner import BenchmarkResult, BenchmarkRunner
from partition_bench.enums import PartitionStrategy
from partition_bench.executor import QueryExecutor

logger = logging.getLogger(__name__)

SKIP_MISSING_TABLE = 'partition table not found'
SKIP_LOOKUP_FAILED = 'partition table lookup failed'


class TableProbe(Protocol):
    async def table_exists(self, name: str) -> bool: ...


def improvement(baseline_avg: float, partitioned_avg: float) -> float | None:
    """Percent by which the partitioned average beats the baseline. None unless both averages are positive."""
    if baseline_avg <= 0 or partitioned_avg <= 0:
        return None
    return (baseline_avg - partitioned_avg) / baseline_avg * 100


def describe_improvement(value: float | None) -> str:
    if value is None:
        return 'n/a'
    if value > 0:
        return f'{value:.1f}% faster'
    if value < 0:
        return f'{-value:.1f}% slower'
    return 'same'


@dataclass(frozen=True)
class ComparisonPair:
    pair: QueryPair
    baseline: BenchmarkResult
    partitioned: BenchmarkResult

    @property
    def improvement(self) -> Annotated[float | None, Doc('Percent saved by the partitioned query; negative when slower.')]:
        return improvement(self.baseline.stats.mean, self.partitioned.stats.mean)

    @property
    def verdict(self) -> str:
        return describe_improvement(self.improvement)


@dataclass(frozen=True)
class SkippedPair:
    pair: QueryPair
    reason: str


ComparisonOutcome: TypeAlias = 'ComparisonPair | SkippedPair'


class ComparisonEngine:
    def __init__(
        self,
        runner: BenchmarkRunner,
        probe: TableProbe,
        catalog: Sequence[QueryPair] = COMPARISON_PAIRS,
    ):
        self.runner = runner
        self.probe = probe
        self.catalog = catalog

    def pairs_for(self, strategy: PartitionStrategy) -> list[QueryPair]:
        return [p for p in self.catalog if p.applies_to(strategy)]

    async def compare(self, qp: QueryPair) -> ComparisonOutcome:
        try:
            exists = await self.probe.table_exists(qp.partitioned_table)
        except SQLAlchemyError as exc:
            logger.warning('%s: SKIPPED (%s: %s)', qp.name, SKIP_LOOKUP_FAILED, exc)
            return SkippedPair(pair=qp, reason=SKIP_LOOKUP_FAILED)
        if not exists:
            logger.info('%s: SKIPPED (%s: %s)', qp.name, SKIP_MISSING_TABLE, qp.partitioned_table)
            return SkippedPair(pair=qp, reason=SKIP_MISSING_TABLE)

        baseline = await self.runner.run(qp.baseline, name='No Partition')
        partitioned = await self.runner.run(qp.partitioned, name='With Partition')
        return ComparisonPair(pair=qp, baseline=baseline, partitioned=partitioned)

    async def run(
        self,
        strategy: PartitionStrategy,
        *,
        on_outcome: Callable[[ComparisonOutcome], None] | None = None,
    ) -> list[ComparisonOutcome]:
        """
        < Compare every pair tagged with `strategy` (or with the ALL wildcard) >
        1. A pair whose partitioned table is missing is skipped with a reason.
        2. Otherwise both queries go through the same runner, baseline first.
        3. `on_outcome` sees each outcome as soon as it is ready.
        """
        outcomes: list[ComparisonOutcome] = []
        for qp in self.pairs_for(strategy):
            outcome = await self.compare(qp)
            if on_outcome is not None:
                on_outcome(outcome)
            outcomes.append(outcome)
        return outcomes


def split_statements(script: str) -> list[str]:
    """Split a DDL script on ';'. Whole-line '--' comments are removed first; empty chunks are dropped."""
    statements = []
    for raw in script.split(';'):
        lines = [line for line in raw.splitlines() if not line.strip().startswith('--')]
        stmt = '\n'.join(lines).strip()
        if stmt:
            statements.append(stmt)
    return statements


async def run_setup_scripts(
    executor: QueryExecutor,
    strategies: Iterable[PartitionStrategy],
    directory: Path,
) -> None:
    """Execute the DDL script of each strategy from `directory`. Statement failures are warnings."""
    for strategy in strategies:
        path = directory / SETUP_SCRIPTS[strategy]
        try:
            script = path.read_text(encoding='utf-8')
        except OSError as exc:
            logger.warning('Could not read %s: %s', path, exc)
            continue

        for stmt in split_statements(script):
            try:
                await executor.execute(stmt)
            except SQLAlchemyError as exc:
                if "doesn't exist" not in str(exc):
                    logger.warning('Error executing setup SQL: %s', exc)
        logger.info('Executed: %s', path)
