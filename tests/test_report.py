from __future__ import annotations

import pytest

from partition_bench.bench import report
from partition_bench.bench.catalog import COMPARISON_PAIRS
from partition_bench.bench.compare import SKIP_MISSING_TABLE, ComparisonPair, SkippedPair
from partition_bench.bench.runner import BenchmarkResult
from partition_bench.bench.stats import EMPTY_STATS, summarize
from partition_bench.introspection import PartitionInfo


def _result(name: str, durations: list[float]) -> BenchmarkResult:
    return BenchmarkResult(
        name=name,
        query='SELECT id FROM books WHERE ' + 'x = 1 AND ' * 20 + 'y = 2',
        iterations=3,
        samples=(),
        rows_observed=0,
        last_row_count=7,
        stats=summarize(durations),
    )


def test_shorten() -> None:
    assert report.shorten('abc', 5) == 'abc'
    assert report.shorten('abcdefgh', 6) == 'abc...'


def test_result_without_samples(capsys: pytest.CaptureFixture[str]) -> None:
    r = _result('Full table count', [])
    assert r.stats is EMPTY_STATS

    report.print_result(r)

    out = capsys.readouterr().out
    assert 'No successful iterations' in out
    assert 'Failed: 3' in out
    assert '...' in out


def test_comparison_prints_verdict(capsys: pytest.CaptureFixture[str]) -> None:
    cmp = ComparisonPair(
        pair=COMPARISON_PAIRS[0],
        baseline=_result('No Partition', [0.010]),
        partitioned=_result('With Partition', [0.008]),
    )

    report.print_comparison(cmp)
    report.print_skipped(SkippedPair(pair=COMPARISON_PAIRS[1], reason=SKIP_MISSING_TABLE))

    out = capsys.readouterr().out
    assert 'Comparison' in out and '20.0% faster' in out
    assert '10.000ms' in out and '8.000ms' in out
    assert f'Full Table Scan: SKIPPED ({SKIP_MISSING_TABLE})' in out


def test_table_stats_and_partitions(capsys: pytest.CaptureFixture[str]) -> None:
    report.print_table_stats({'books': 12, 'books_hash': None})
    report.print_partitions('books', [])
    report.print_partitions('books_hash', [PartitionInfo('p0', 'HASH', 'id', 3)])

    out = capsys.readouterr().out
    assert not any(line.startswith('books_hash ') for line in out.splitlines())
    assert 'No partitions (standard table)' in out
    assert 'Partition: p0' in out
