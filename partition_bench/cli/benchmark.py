from __future__ import annotations

import argparse
import logging
import random
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from partition_bench.bench import report
from partition_bench.bench.catalog import BENCHMARK_QUERIES, QuerySpec
from partition_bench.bench.recorder import ResultRecorder
from partition_bench.bench.runner import DEFAULT_ITERATIONS, DEFAULT_WARMUP, BenchmarkRunner
from partition_bench.cli._common import (
    add_connection_args,
    configure_logging,
    open_executor,
    run_main,
    settings_from_args,
)
from partition_bench.introspection import SchemaInspector
from partition_bench.models import STAT_TABLES

logger = logging.getLogger(__name__)

PARTITION_TABLES = ('books', 'book_tags', 'authors', 'author_tags', 'tags')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pb-benchmark', description='Time the catalog queries against the book schema.')
    add_connection_args(parser)
    parser.add_argument('--iterations', type=int, default=DEFAULT_ITERATIONS, help='Timed iterations per query')
    parser.add_argument('--warmup', type=int, default=DEFAULT_WARMUP, help='Untimed warmup iterations per query')
    parser.add_argument('--explain', action='store_true', help='Show EXPLAIN output for each query')
    parser.add_argument(
        '--query', action='append', default=[], help='Only run queries whose name contains this text (repeatable)'
    )
    parser.add_argument('--seed', type=int, help='Random seed for parameter draws')
    parser.add_argument('--results-dir', help='Append JSON lines with every result to this directory')
    return parser


def select_queries(names: Sequence[str], catalog: Sequence[QuerySpec] = BENCHMARK_QUERIES) -> list[QuerySpec]:
    if not names:
        return list(catalog)
    wanted = [n.lower() for n in names]
    return [q for q in catalog if any(w in q.name.lower() for w in wanted)]


async def show_partition_info(inspector: SchemaInspector, tables: Sequence[str] = PARTITION_TABLES) -> None:
    """Print the partition layout of each table. A table whose lookup fails is logged and skipped."""
    for table in tables:
        try:
            partitions = await inspector.partitions(table)
        except SQLAlchemyError as exc:
            logger.warning('Cannot read partitions of %s: %s', table, exc)
            continue
        report.print_partitions(table, partitions)


async def benchmark(args: argparse.Namespace) -> None:
    queries = select_queries(args.query)
    recorder = (
        ResultRecorder(args.results_dir, suite='benchmark', iterations=args.iterations, warmup=args.warmup)
        if args.results_dir
        else None
    )

    async with open_executor(settings_from_args(args)) as executor:
        inspector = SchemaInspector(executor)
        runner = BenchmarkRunner(
            executor,
            iterations=args.iterations,
            warmup=args.warmup,
            rng=random.Random(args.seed) if args.seed is not None else None,
        )

        report.print_banner('TABLE STATISTICS')
        report.print_table_stats({t: await inspector.count_rows(t) for t in STAT_TABLES})

        report.print_banner('BENCHMARK RESULTS')
        print(f'Running benchmarks with {args.iterations} iterations (+ {args.warmup} warmup)...')
        for spec in queries:
            result = await runner.run(spec)
            report.print_result(result)
            if recorder is not None:
                recorder.record_result(result)
            if args.explain:
                try:
                    report.print_explain(*await inspector.explain(spec.sql))
                except SQLAlchemyError as exc:
                    logger.warning('EXPLAIN failed for %r: %s', spec.name, exc)

        report.print_banner('PARTITION INFORMATION')
        await show_partition_info(inspector)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_main(lambda: benchmark(args))


if __name__ == '__main__':
    raise SystemExit(main())
