from __future__ import annotations

from pathlib import Path

import pytest

from partition_bench.bench.catalog import BENCHMARK_QUERIES
from partition_bench.cli import benchmark, compare, seed
from partition_bench.cli._common import settings_from_args
from partition_bench.enums import DBKind
from partition_bench.introspection import SchemaInspector

from .fakes import FakeExecutor, db_error


def test_seed_defaults() -> None:
    args = seed.build_parser().parse_args([])

    assert (args.authors, args.books, args.tags) == (10_000, 1_000_000, 1_000)
    assert (args.book_tags, args.author_tags) == (5_000_000, 50_000)
    assert args.workers == 8
    assert args.batch_size == 5_000
    assert args.truncate is False


def test_benchmark_flags() -> None:
    args = benchmark.build_parser().parse_args(['--iterations', '5', '--explain', '--query', 'join', '--query', 'COUNT'])

    assert args.iterations == 5
    assert args.warmup == 3
    assert args.explain is True
    assert args.query == ['join', 'COUNT']


def test_select_queries_matches_substrings() -> None:
    picked = benchmark.select_queries(['join', 'full table'])

    assert [q.name for q in picked] == ['Full table count', 'Complex JOIN (books -> tags)']
    assert benchmark.select_queries([]) == list(BENCHMARK_QUERIES)


def test_compare_flags() -> None:
    args = compare.build_parser().parse_args(['--type', 'all', '--setup', 'sql'])

    assert args.strategy == 'all'
    assert args.setup == Path('sql')
    assert compare.build_parser().parse_args([]).strategy == 'hash'

    with pytest.raises(SystemExit):
        compare.build_parser().parse_args(['--type', 'round_robin'])


def test_flags_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv('DB_KIND', 'postgres')
    monkeypatch.setenv('DB_HOST', 'from-env')
    monkeypatch.setenv('DB_USER', 'env-user')
    monkeypatch.delenv('DB_DSN', raising=False)

    args = seed.build_parser().parse_args(['--host', 'from-flag', '--port', '15432'])
    settings = settings_from_args(args)

    assert settings.kind == DBKind.POSTGRES
    assert settings.host == 'from-flag'
    assert settings.port == 15432
    assert settings.user == 'env-user'
    assert settings.echo is False



@pytest.mark.asyncio
async def test_partition_lookup_failure_moves_on(
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    executor = FakeExecutor(DBKind.MYSQL, query_errors=[db_error('information_schema access denied')])
    inspector = SchemaInspector(executor)  # type: ignore[arg-type]

    await benchmark.show_partition_info(inspector, ['books', 'tags'])

    out = capsys.readouterr().out
    assert 'books:' not in out
    assert 'tags:' in out
    assert 'No partitions (standard table)' in out
    assert 'Cannot read partitions of books' in caplog.text
