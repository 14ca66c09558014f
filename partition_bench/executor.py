from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeVar

from sqlalchemy import Connection, Row, TextClause, bindparam, text
from sqlalchemy.ext.asyncio import AsyncEngine

from partition_bench.enums import DBKind

T = TypeVar('T')

_DIALECT_KINDS = {
    'mysql': DBKind.MYSQL,
    'mariadb': DBKind.MYSQL,
    'postgresql': DBKind.POSTGRES,
    'sqlite': DBKind.SQLITE,
}


class QueryExecutor(Protocol):
    """Generic row-store access used by the seeder and the benchmark tools."""

    @property
    def dialect(self) -> DBKind: ...

    async def execute(self, sql: str, args: Sequence[Any] = ()) -> int: ...

    async def query(self, sql: str, args: Sequence[Any] = ()) -> Sequence[Any]: ...

    async def execute_script(self, statements: Sequence[str], *, always: Sequence[str] = ()) -> None: ...


def split_placeholders(sql: str) -> list[str]:
    """Split a template on bare `?` placeholders. `?` inside quoted literals is kept as text."""
    parts: list[str] = []
    buf: list[str] = []
    quote: str | None = None

    for ch in sql:
        if quote is not None:
            buf.append(ch)
            if ch == quote:
                quote = None
            continue

        if ch in ("'", '"'):
            quote = ch
            buf.append(ch)
        elif ch == '?':
            parts.append(''.join(buf))
            buf = []
        else:
            buf.append(ch)

    parts.append(''.join(buf))
    return parts


def count_placeholders(sql: str) -> int:
    return len(split_placeholders(sql)) - 1


def bind_positional(sql: str, args: Sequence[Any]) -> TextClause:
    """
    < Turn a `?` placeholder template into a bound text() statement >
    1. Split the template on bare placeholders.
    2. Re-join it with a named bind `:p<N>` in place of each `?`, typed from its value.
    3. The number of placeholders must match len(args).
    """
    parts = split_placeholders(sql)
    n = len(parts) - 1
    if n != len(args):
        raise ValueError(f'Statement has {n} placeholder(s) but {len(args)} argument(s) were given.')

    rendered = ''.join(f'{part}:p{i}' for i, part in enumerate(parts[:-1])) + parts[-1]
    binds = [bindparam(f'p{i}', value) for i, value in enumerate(args)]
    return text(rendered).bindparams(*binds)


class EngineExecutor:
    """QueryExecutor backed by a SQLAlchemy AsyncEngine. Every execute() runs in its own transaction."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        name = engine.dialect.name
        if name not in _DIALECT_KINDS:
            raise ValueError(f'Unsupported dialect: {name}')
        self._dialect = _DIALECT_KINDS[name]

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def dialect(self) -> DBKind:
        return self._dialect

    async def execute(self, sql: str, args: Sequence[Any] = ()) -> int:
        stmt = bind_positional(sql, args)
        async with self._engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount

    async def query(self, sql: str, args: Sequence[Any] = ()) -> list[Row[Any]]:
        stmt = bind_positional(sql, args)
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            return list(result.all())

    async def execute_script(self, statements: Sequence[str], *, always: Sequence[str] = ()) -> None:
        """
        < Run parameterless statements in order on one connection >
        1. Everything runs inside a single transaction, so session settings carry across statements.
        2. `always` runs afterwards even if a statement failed, before the connection goes back to the pool.
        """
        async with self._engine.begin() as conn:
            try:
                for sql in statements:
                    await conn.execute(text(sql))
            finally:
                for sql in always:
                    await conn.execute(text(sql))

    async def run_sync(self, fn: Callable[[Connection], T]) -> T:
        async with self._engine.connect() as conn:
            return await conn.run_sync(fn)
