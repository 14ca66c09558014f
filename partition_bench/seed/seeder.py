from __future__ import annotations

import logging
import random
import time
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from partition_bench.enums import DBKind
from partition_bench.executor import QueryExecutor
from partition_bench.models import TRUNCATE_ORDER
from partition_bench.seed.batch import DEFAULT_BATCH_SIZE, BatchBuilder
from partition_bench.seed.pool import DEFAULT_WORKERS, run_workers
from partition_bench.seed.progress import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_SETTLE_SECONDS,
    ProgressCounter,
    ProgressReporter,
)
from partition_bench.seed.records import SeedTarget
from partition_bench.seed.tracker import DEFAULT_TRACKER_THRESHOLD, DuplicateTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseResult:
    target: SeedTarget
    inserted: int
    dropped: int
    failed_batches: int


@dataclass(frozen=True)
class SeedSummary:
    generated: int
    inserted: int
    elapsed: float
    phases: tuple[PhaseResult, ...]

    @property
    def rate(self) -> float:
        return self.generated / self.elapsed if self.elapsed > 0 else 0.0

    def format(self) -> str:
        return f'Completed! Total time: {self.elapsed:.0f}s, Records: {self.generated}, Rate: {self.rate:.0f}/sec'


class Seeder:
    """
    Fans each seeding phase out over a fixed pool of workers.

    Workers share only the executor and the progress counter. Each one owns its random
    source and, for association tables, its own DuplicateTracker.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        workers: int = DEFAULT_WORKERS,
        batch_size: int = DEFAULT_BATCH_SIZE,
        tracker_threshold: int = DEFAULT_TRACKER_THRESHOLD,
        seed: int | None = None,
        counter: ProgressCounter | None = None,
    ):
        if workers < 1:
            raise ValueError('workers must be >= 1.')
        if batch_size < 1:
            raise ValueError('batch_size must be >= 1.')
        self.executor = executor
        self.workers = workers
        self.batch_size = batch_size
        self.tracker_threshold = tracker_threshold
        self.seed = seed
        self.counter = counter or ProgressCounter()

    def _rng_for(self, target: SeedTarget, worker_id: int) -> random.Random:
        if self.seed is None:
            return random.Random()
        return random.Random(f'{self.seed}:{target.role}:{worker_id}')

    async def seed_target(self, target: SeedTarget) -> PhaseResult:
        logger.info('Seeding %d %s rows with %d workers...', target.count, target.role, self.workers)

        async def work(worker_id: int, indices: range) -> BatchBuilder:
            builder = BatchBuilder(
                self.executor,
                target,
                counter=self.counter,
                rng=self._rng_for(target, worker_id),
                batch_size=self.batch_size,
                tracker=DuplicateTracker(self.tracker_threshold) if target.role.is_association else None,
                worker_id=worker_id,
            )
            await builder.run_range(indices)
            return builder

        builders = await run_workers(target.count, self.workers, work)
        return PhaseResult(
            target=target,
            inserted=sum(b.inserted for b in builders),
            dropped=sum(b.dropped for b in builders),
            failed_batches=sum(b.failed_batches for b in builders),
        )


async def run_seeding(
    seeder: Seeder,
    targets: Sequence[SeedTarget],
    *,
    interval: float = DEFAULT_INTERVAL_SECONDS,
    settle: float = DEFAULT_SETTLE_SECONDS,
) -> SeedSummary:
    """
    < Run every phase in order while a ProgressReporter logs throughput >
    1. The reporter's target is the sum of all phase counts.
    2. Phases run one after another; inside a phase the workers run in parallel.
    3. The final count is read from the counter, not from the reporter.
    """
    total = sum(t.count for t in targets)
    started = time.perf_counter()
    phases: list[PhaseResult] = []

    async with ProgressReporter(seeder.counter, total, interval=interval, settle=settle):
        for target in targets:
            phases.append(await seeder.seed_target(target))

    return SeedSummary(
        generated=seeder.counter.value,
        inserted=sum(p.inserted for p in phases),
        elapsed=time.perf_counter() - started,
        phases=tuple(phases),
    )


async def truncate_tables(executor: QueryExecutor, tables: Sequence[str] = TRUNCATE_ORDER) -> None:
    """
    < Empty `tables` so the next run starts from id 1 >
    1. postgres: one TRUNCATE over every table (foreign keys between them are allowed) with RESTART IDENTITY.
    2. mysql: per-table TRUNCATE on one connection with FOREIGN_KEY_CHECKS off, switched back on afterwards.
    3. sqlite: DELETE FROM in child-first order; rowids restart once the table is empty.
    Failures are warnings.
    """
    kind = executor.dialect
    if kind == DBKind.SQLITE:
        for table in tables:
            try:
                await executor.execute(f'DELETE FROM {table}')
            except SQLAlchemyError as exc:
                logger.warning('Failed to truncate %s: %s', table, exc)
        return

    try:
        if kind == DBKind.POSTGRES:
            await executor.execute(f'TRUNCATE TABLE {", ".join(tables)} RESTART IDENTITY')
        else:
            await executor.execute_script(
                ['SET FOREIGN_KEY_CHECKS = 0', *(f'TRUNCATE TABLE {table}' for table in tables)],
                always=['SET FOREIGN_KEY_CHECKS = 1'],
            )
    except SQLAlchemyError as exc:
        logger.warning('Failed to truncate %s: %s', ', '.join(tables), exc)
