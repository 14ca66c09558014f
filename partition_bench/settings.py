from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Final

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from partition_bench.enums import DBKind
from partition_bench.exceptions import DatabaseUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_HOST: Final[str] = 'localhost'
DEFAULT_USER: Final[str] = 'app'
DEFAULT_PASSWORD: Final[str] = 'app'
DEFAULT_DATABASE: Final[str] = 'bookdb'
DEFAULT_SQLITE_PATH: Final[str] = 'bookdb.sqlite3'

DEFAULT_PORTS: Final[dict[DBKind, int]] = {
    DBKind.MYSQL: 3306,
    DBKind.POSTGRES: 5432,
}

_DRIVERS: Final[dict[DBKind, str]] = {
    DBKind.MYSQL: 'mysql+aiomysql',
    DBKind.POSTGRES: 'postgresql+asyncpg',
    DBKind.SQLITE: 'sqlite+aiosqlite',
}

PROBE_ATTEMPTS: Final[int] = 30
PROBE_DELAY_SECONDS: Final[float] = 1.0


def _env(key: str, default: str | None = None) -> str | None:
    value = (os.getenv(key) or '').strip()
    return value or default


@dataclass(frozen=True)
class DBSettings:
    kind: DBKind = DBKind.MYSQL
    host: str = DEFAULT_HOST
    port: int | None = None
    user: str = DEFAULT_USER
    password: str = DEFAULT_PASSWORD
    database: str = DEFAULT_DATABASE
    sqlite_path: str = DEFAULT_SQLITE_PATH
    dsn: str | None = None
    echo: bool = False

    @staticmethod
    def from_env() -> DBSettings:
        """
        < Load connection settings from environment variables >
        1. DB_KIND selects the backend. The default is mysql.
        2. DB_DSN, when set, is used verbatim and wins over the individual fields.
        3. DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_NAME fill the server URL.
        4. DB_SQLITE_PATH names the database file for sqlite.
        """
        kind = DBKind((_env('DB_KIND') or DBKind.MYSQL.value).lower())
        port_raw = _env('DB_PORT')
        echo = (_env('DB_ECHO') or '').lower() in {'1', 'true', 'yes', 'y'}

        return DBSettings(
            kind=kind,
            host=_env('DB_HOST', DEFAULT_HOST) or DEFAULT_HOST,
            port=int(port_raw) if port_raw else None,
            user=_env('DB_USER', DEFAULT_USER) or DEFAULT_USER,
            password=_env('DB_PASSWORD', DEFAULT_PASSWORD) or DEFAULT_PASSWORD,
            database=_env('DB_NAME', DEFAULT_DATABASE) or DEFAULT_DATABASE,
            sqlite_path=_env('DB_SQLITE_PATH', DEFAULT_SQLITE_PATH) or DEFAULT_SQLITE_PATH,
            dsn=_env('DB_DSN'),
            echo=echo,
        )

    def with_overrides(self, **changes: Any) -> DBSettings:
        """Return a copy with every non-None keyword applied (CLI flags win over the environment)."""
        applied = {key: value for key, value in changes.items() if value is not None}
        if 'kind' in applied:
            applied['kind'] = DBKind(str(applied['kind']).strip().lower())
        return replace(self, **applied)

    @property
    def url(self) -> URL:
        if self.dsn:
            return make_url(self.dsn)

        if self.kind == DBKind.SQLITE:
            return URL.create(_DRIVERS[DBKind.SQLITE], database=self.sqlite_path)

        return URL.create(
            _DRIVERS[self.kind],
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port or DEFAULT_PORTS[self.kind],
            database=self.database,
        )


def create_engine(settings: DBSettings, *, workers: int = 1) -> AsyncEngine:
    """
    < Build the AsyncEngine shared by every worker >
    1. Server databases get a pool of `workers` connections plus the same overflow,
       so the pool is never narrower than the worker pool.
    2. sqlite keeps the driver default pool and a generous busy timeout for concurrent writers.
    """
    kwargs: dict[str, Any] = {
        'echo': settings.echo,
        'pool_pre_ping': True,
    }

    if settings.kind == DBKind.SQLITE:
        kwargs['connect_args'] = {'check_same_thread': False, 'timeout': 30}
    else:
        size = max(workers, 1)
        kwargs['pool_size'] = size
        kwargs['max_overflow'] = size

    return create_async_engine(settings.url, **kwargs)


async def connect_with_retry(
    engine: AsyncEngine,
    *,
    attempts: int = PROBE_ATTEMPTS,
    delay: float = PROBE_DELAY_SECONDS,
) -> None:
    """
    < Probe the database until it answers or the attempts run out >
    1. Each attempt opens a connection and runs SELECT 1.
    2. Between failed attempts sleep `delay` seconds.
    3. After the last failure raise DatabaseUnavailableError.
    """
    if attempts < 1:
        raise ValueError('attempts must be >= 1.')

    last_error: BaseException | None = None
    for attempt in range(1, attempts + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(text('SELECT 1'))
            return
        except (SQLAlchemyError, OSError) as exc:
            last_error = exc
            logger.info('Database not ready (attempt %d/%d): %s', attempt, attempts, exc)
            if attempt < attempts:
                await asyncio.sleep(delay)

    raise DatabaseUnavailableError(attempts, last_error)
