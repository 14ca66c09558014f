"""Shared CLI helpers: connection flags, logging, engine lifecycle."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from partition_bench.enums import DBKind
from partition_bench.exceptions import DatabaseUnavailableError
from partition_bench.executor import EngineExecutor
from partition_bench.settings import DBSettings, connect_with_retry, create_engine

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def add_connection_args(parser: argparse.ArgumentParser) -> None:
    """Connection flags. Anything left unset falls back to the DB_* environment variables."""
    group = parser.add_argument_group('connection')
    group.add_argument('--kind', choices=[k.value for k in DBKind], help='Database backend (DB_KIND)')
    group.add_argument('--host', help='Database host (DB_HOST)')
    group.add_argument('--port', type=int, help='Database port (DB_PORT)')
    group.add_argument('--user', help='Database user (DB_USER)')
    group.add_argument('--password', help='Database password (DB_PASSWORD)')
    group.add_argument('--db', dest='database', help='Database name (DB_NAME)')
    group.add_argument('--dsn', help='Full SQLAlchemy URL, overrides the fields above (DB_DSN)')
    group.add_argument('--sqlite-path', help='Database file for --kind sqlite (DB_SQLITE_PATH)')
    group.add_argument('--echo', action='store_true', default=None, help='Log every SQL statement')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')


def settings_from_args(args: argparse.Namespace) -> DBSettings:
    return DBSettings.from_env().with_overrides(
        kind=args.kind,
        host=args.host,
        port=args.port,
        user=args.user,
        password=args.password,
        database=args.database,
        dsn=args.dsn,
        sqlite_path=args.sqlite_path,
        echo=args.echo,
    )


@asynccontextmanager
async def open_executor(settings: DBSettings, *, workers: int = 1) -> AsyncIterator[EngineExecutor]:
    """
    < Connect, probe, and hand out an executor; dispose the engine afterwards >
    1. The engine pool is sized for `workers` concurrent users.
    2. connect_with_retry() raises DatabaseUnavailableError if the probe never succeeds.
    """
    engine = create_engine(settings, workers=workers)
    try:
        await connect_with_retry(engine)
        logger.info('Connected to database')
        yield EngineExecutor(engine)
    finally:
        await engine.dispose()


def run_main(fn: Callable[[], Awaitable[None]]) -> int:
    """Run an async entry point. A connection failure is fatal and maps to exit status 1."""
    try:
        asyncio.run(fn())
    except DatabaseUnavailableError as exc:
        logger.error('Failed to connect: %s', exc)
        return 1
    return 0
