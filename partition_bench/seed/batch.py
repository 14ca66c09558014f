from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Any, Final

from sqlalchemy.exc import SQLAlchemyError

from partition_bench.enums import DBKind
from partition_bench.executor import QueryExecutor
from partition_bench.seed.progress import ProgressCounter
from partition_bench.seed.records import LAYOUTS, GeneratedRecord, SeedTarget, TableLayout
from partition_bench.seed.tracker import DuplicateTracker

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE: Final[int] = 5_000


def build_insert(
    table: str,
    columns: Sequence[str],
    rows: Sequence[GeneratedRecord],
    *,
    dialect: DBKind,
    ignore: bool = False,
) -> tuple[str, list[Any]]:
    """
    < Render one multi-row INSERT with `?` placeholders >
    1. One "(?, ?, ...)" group per row, in row order.
    2. Arguments are the rows flattened in the same order.
    3. `ignore=True` adds the dialect's insert-or-ignore form so duplicate keys are dropped.
    """
    if not rows:
        raise ValueError('rows must not be empty.')

    group = '(' + ', '.join('?' for _ in columns) + ')'
    values = ', '.join(group for _ in rows)
    column_list = ', '.join(columns)

    if ignore and dialect == DBKind.MYSQL:
        head = 'INSERT IGNORE INTO'
    elif ignore and dialect == DBKind.SQLITE:
        head = 'INSERT OR IGNORE INTO'
    else:
        head = 'INSERT INTO'

    sql = f'{head} {table} ({column_list}) VALUES {values}'
    if ignore and dialect == DBKind.POSTGRES:
        sql += ' ON CONFLICT DO NOTHING'

    args = [value for row in rows for value in row]
    return sql, args


class BatchBuilder:
    """Generates and inserts one worker's sequence-index range, `batch_size` records per statement."""

    def __init__(
        self,
        executor: QueryExecutor,
        target: SeedTarget,
        *,
        counter: ProgressCounter,
        rng: random.Random | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        tracker: DuplicateTracker | None = None,
        worker_id: int = 0,
    ):
        if batch_size < 1:
            raise ValueError('batch_size must be >= 1.')
        if target.role.is_association and tracker is None:
            tracker = DuplicateTracker()

        self.executor = executor
        self.target = target
        self.layout: TableLayout = LAYOUTS[target.role]
        self.counter = counter
        self.rng = rng or random.Random()
        self.batch_size = batch_size
        self.tracker = tracker if target.role.is_association else None
        self.worker_id = worker_id

        self.inserted = 0
        self.dropped = 0
        self.failed_batches = 0

    def generate(self, start: int, end: int) -> list[GeneratedRecord]:
        """One candidate per index in [start, end). Association pairs already in the window are dropped, not retried."""
        rows: list[GeneratedRecord] = []
        for index in range(start, end):
            record = self.layout.make_record(self.rng, index, self.target)
            if self.tracker is not None:
                key = (record[0], record[1])
                if self.tracker.contains(key):
                    self.dropped += 1
                    continue
                self.tracker.record(key)
            rows.append(record)
        return rows

    async def run_batch(self, start: int, end: int) -> int:
        """
        < Generate, insert and account for indices [start, end) >
        1. Build the candidate rows (may be fewer than end - start for associations).
        2. Insert them with one statement; a database error is logged and the batch is lost.
        3. Advance the shared counter by the full index range regardless of the outcome.
        """
        rows = self.generate(start, end)
        written = 0
        try:
            if rows:
                sql, args = build_insert(
                    self.layout.table,
                    self.layout.columns,
                    rows,
                    dialect=self.executor.dialect,
                    ignore=self.target.role.is_association,
                )
                await self.executor.execute(sql, args)
                written = len(rows)
        except SQLAlchemyError as exc:
            self.failed_batches += 1
            logger.warning('Worker %d: error inserting %s: %s', self.worker_id, self.layout.table, exc)
        finally:
            self.counter.add(end - start)
            if self.tracker is not None:
                self.tracker.maybe_reset()

        self.inserted += written
        return written

    async def run_range(self, indices: range) -> int:
        for start in range(indices.start, indices.stop, self.batch_size):
            await self.run_batch(start, min(start + self.batch_size, indices.stop))
        return self.inserted
