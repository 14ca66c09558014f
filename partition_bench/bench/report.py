from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from partition_bench.bench.compare import ComparisonPair, SkippedPair
from partition_bench.bench.runner import BenchmarkResult
from partition_bench.introspection import PartitionInfo

WIDE = 120
NARROW = 100


def ms(seconds: float) -> str:
    return f'{seconds * 1000:.3f}ms'


def shorten(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + '...'


def print_banner(title: str, width: int = NARROW) -> None:
    print()
    print('=' * width)
    print(title)
    print('=' * width)


def print_table_stats(counts: Mapping[str, int | None], *, width: int = 15) -> None:
    """Row counts per table. Tables that could not be counted are left out."""
    for table, count in counts.items():
        if count is None:
            continue
        print(f'{table:<{width}}: {count:>12} rows')


def print_result(r: BenchmarkResult) -> None:
    s = r.stats
    print()
    print(f'{r.name:<40}')
    print(f'  Query: {shorten(r.query, 80)}')
    print(f'  Iterations: {r.iterations} | Failed: {r.failed} | Total rows: {r.rows_observed}')
    if not s.is_valid:
        print('  No successful iterations')
        return
    print(f'  Min: {ms(s.min)} | Max: {ms(s.max)} | Avg: {ms(s.mean)} | Median: {ms(s.median)} | P95: {ms(s.p95)}')


def _comparison_row(r: BenchmarkResult) -> str:
    s = r.stats
    return (
        f'  {r.name:<20} | {ms(s.min):>12} | {ms(s.max):>12} | {ms(s.mean):>12} | '
        f'{ms(s.median):>12} | {ms(s.p95):>12} | {r.last_row_count:>8}'
    )


def print_comparison(cmp: ComparisonPair) -> None:
    print()
    print(cmp.pair.name)
    print(f'  {cmp.pair.description}')
    print('-' * NARROW)
    print(f'  {"":<20} | {"Min":>12} | {"Max":>12} | {"Avg":>12} | {"Median":>12} | {"P95":>12} | {"Rows":>8}')
    print('  ' + '-' * 98)
    print(_comparison_row(cmp.baseline))
    print(_comparison_row(cmp.partitioned))
    if cmp.improvement is not None:
        print(f'  {"Comparison":<20} | {cmp.verdict}')


def print_skipped(skipped: SkippedPair) -> None:
    print()
    print(f'{skipped.pair.name}: SKIPPED ({skipped.reason})')


def print_partitions(table: str, partitions: Sequence[PartitionInfo]) -> None:
    print()
    print(f'{table}:')
    if not partitions:
        print('  No partitions (standard table)')
        return
    for p in partitions:
        print(f'  Partition: {p.name:<15} | Method: {p.method:<10} | Expr: {p.expression:<20} | Rows: {p.rows}')


def print_explain(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    print('  EXPLAIN:')
    print('    ' + ' | '.join(columns))
    for row in rows:
        print('    ' + ' | '.join('NULL' if v is None else str(v) for v in row))
