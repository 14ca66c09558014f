from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from partition_bench.enums import DBKind
from partition_bench.executor import EngineExecutor, QueryExecutor, split_placeholders

logger = logging.getLogger(__name__)

_MYSQL_PARTITIONS_SQL = """
    SELECT PARTITION_NAME, PARTITION_METHOD, PARTITION_EXPRESSION, TABLE_ROWS
    FROM INFORMATION_SCHEMA.PARTITIONS
    WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = ?
    ORDER BY PARTITION_ORDINAL_POSITION
"""

_POSTGRES_PARTITIONS_SQL = """
    SELECT child.relname, pt.partstrat, pg_get_expr(child.relpartbound, child.oid), child.reltuples::bigint
    FROM pg_inherits i
    JOIN pg_class parent ON parent.oid = i.inhparent
    JOIN pg_class child ON child.oid = i.inhrelid
    JOIN pg_partitioned_table pt ON pt.partrelid = parent.oid
    WHERE parent.relname = ?
    ORDER BY child.relname
"""

_POSTGRES_STRATEGIES = {'h': 'HASH', 'l': 'LIST', 'r': 'RANGE'}


@dataclass(frozen=True)
class PartitionInfo:
    name: str
    method: str
    expression: str
    rows: int


async def fetch_max_id(executor: QueryExecutor, table: str) -> int:
    """Largest id in `table`, or 1 when the table is empty."""
    rows = await executor.query(f'SELECT COALESCE(MAX(id), 1) FROM {table}')
    return int(rows[0][0]) if rows else 1


def fill_placeholders(sql: str, value: str = '1') -> str:
    # EXPLAIN cannot take bind parameters on every backend, so inline a sample value.
    return value.join(split_placeholders(sql))


class SchemaInspector:
    def __init__(self, executor: EngineExecutor):
        self._executor = executor

    async def table_exists(self, name: str) -> bool:
        return await self._executor.run_sync(lambda conn: inspect(conn).has_table(name))

    async def count_rows(self, table: str) -> int | None:
        """Row count, or None when the table cannot be read (usually: it does not exist)."""
        try:
            rows = await self._executor.query(f'SELECT COUNT(*) FROM {table}')
        except SQLAlchemyError as exc:
            logger.debug('Cannot count %s: %s', table, exc)
            return None
        return int(rows[0][0])

    async def max_id(self, table: str) -> int:
        return await fetch_max_id(self._executor, table)

    async def partitions(self, table: str) -> list[PartitionInfo]:
        """
        < List the physical partitions of `table` >
        1. mysql: INFORMATION_SCHEMA.PARTITIONS (an unpartitioned table yields one row with a NULL name).
        2. postgres: children of the partitioned parent in pg_inherits.
        3. sqlite has no partitioning, so the list is always empty.
        """
        kind = self._executor.dialect
        if kind == DBKind.SQLITE:
            return []

        sql = _MYSQL_PARTITIONS_SQL if kind == DBKind.MYSQL else _POSTGRES_PARTITIONS_SQL
        rows = await self._executor.query(sql, (table,))

        out: list[PartitionInfo] = []
        for name, method, expression, row_estimate in rows:
            if not name:
                continue
            if kind == DBKind.POSTGRES:
                method = _POSTGRES_STRATEGIES.get(method, method)
            out.append(
                PartitionInfo(
                    name=str(name),
                    method=str(method or ''),
                    expression=str(expression or ''),
                    rows=int(row_estimate or 0),
                )
            )
        return out

    async def explain(self, sql: str) -> tuple[list[str], list[Sequence[Any]]]:
        rows = await self._executor.query('EXPLAIN ' + fill_placeholders(sql))
        columns = list(rows[0]._fields) if rows else []
        return columns, [tuple(row) for row in rows]
