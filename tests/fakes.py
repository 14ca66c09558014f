from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy.exc import OperationalError

from partition_bench.enums import DBKind

MAX_ID_PREFIX = 'SELECT COALESCE(MAX(id), 1) FROM '


def db_error(message: str = 'boom') -> OperationalError:
    return OperationalError('stmt', {}, Exception(message))


class FakeExecutor:
    """
    QueryExecutor test double:
    - execute(sql, args): records the call; raises the next scripted error if any are queued
    - execute_script(statements, always): recorded as one call; shares the execute error queue
    - query(sql, args): answers max-id lookups from `max_ids`, everything else from `rows`
    """

    def __init__(
        self,
        dialect: DBKind = DBKind.SQLITE,
        *,
        max_ids: dict[str, int] | None = None,
        rows: Iterable[Any] | None = None,
        execute_errors: Iterable[BaseException | None] | None = None,
        query_errors: Iterable[BaseException | None] | None = None,
    ):
        self.dialect = dialect
        self.max_ids = dict(max_ids or {})
        self.rows: list[Any] = list(rows or [])
        self._execute_errors = list(execute_errors or [])
        self._query_errors = list(query_errors or [])
        self.executed: list[tuple[str, list[Any]]] = []
        self.scripts: list[tuple[list[str], list[str]]] = []
        self.queries: list[tuple[str, tuple[Any, ...]]] = []
        self.max_id_lookups: list[str] = []

    async def execute(self, sql: str, args: Sequence[Any] = ()) -> int:
        self.executed.append((sql, list(args)))
        if self._execute_errors:
            err = self._execute_errors.pop(0)
            if err is not None:
                raise err
        return 1

    async def execute_script(self, statements: Sequence[str], *, always: Sequence[str] = ()) -> None:
        self.scripts.append((list(statements), list(always)))
        if self._execute_errors:
            err = self._execute_errors.pop(0)
            if err is not None:
                raise err

    async def query(self, sql: str, args: Sequence[Any] = ()) -> list[Any]:
        if sql.startswith(MAX_ID_PREFIX):
            table = sql[len(MAX_ID_PREFIX) :]
            self.max_id_lookups.append(table)
            return [(self.max_ids.get(table, 1),)]

        self.queries.append((sql, tuple(args)))
        if self._query_errors:
            err = self._query_errors.pop(0)
            if err is not None:
                raise err
        return list(self.rows)


class FakeProbe:
    """TableProbe test double answering from a fixed set of table names."""

    def __init__(self, existing: Iterable[str] = ()):
        self.existing = set(existing)
        self.asked: list[str] = []

    async def table_exists(self, name: str) -> bool:
        self.asked.append(name)
        return name in self.existing


class DurationClock:
    """perf_counter stand-in: every (start, stop) pair of calls measures the next scripted duration."""

    def __init__(self, durations: Sequence[float]):
        self._durations = list(durations)
        self._now = 0.0
        self._running = False

    def __call__(self) -> float:
        if not self._running:
            self._running = True
            return self._now
        self._running = False
        self._now += self._durations.pop(0)
        return self._now
