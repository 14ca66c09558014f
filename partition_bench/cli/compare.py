from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from partition_bench.bench import report
from partition_bench.bench.catalog import COMPARISON_STAT_TABLES
from partition_bench.bench.compare import ComparisonEngine, ComparisonOutcome, ComparisonPair, run_setup_scripts
from partition_bench.bench.recorder import ResultRecorder
from partition_bench.bench.runner import DEFAULT_ITERATIONS, DEFAULT_WARMUP, BenchmarkRunner
from partition_bench.cli._common import (
    add_connection_args,
    configure_logging,
    open_executor,
    run_main,
    settings_from_args,
)
from partition_bench.enums import PartitionStrategy
from partition_bench.introspection import SchemaInspector


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pb-compare', description='Compare query latency on partitioned vs. unpartitioned tables.'
    )
    add_connection_args(parser)
    parser.add_argument('--iterations', type=int, default=DEFAULT_ITERATIONS, help='Timed iterations per query')
    parser.add_argument('--warmup', type=int, default=DEFAULT_WARMUP, help='Untimed warmup iterations per query')
    parser.add_argument(
        '--type',
        dest='strategy',
        choices=[s.value for s in PartitionStrategy],
        default=PartitionStrategy.HASH.value,
        help='Partition strategy to compare',
    )
    parser.add_argument('--setup', type=Path, metavar='DIR', help='Run the strategy DDL scripts from DIR first')
    parser.add_argument('--results-dir', help='Append JSON lines with every comparison to this directory')
    return parser


async def compare(args: argparse.Namespace) -> None:
    strategies = PartitionStrategy.expand(args.strategy)
    recorder = (
        ResultRecorder(args.results_dir, suite='compare', iterations=args.iterations, warmup=args.warmup)
        if args.results_dir
        else None
    )

    def show(outcome: ComparisonOutcome) -> None:
        if isinstance(outcome, ComparisonPair):
            report.print_comparison(outcome)
            if recorder is not None:
                recorder.record_comparison(outcome)
        else:
            report.print_skipped(outcome)

    async with open_executor(settings_from_args(args)) as executor:
        if args.setup is not None:
            await run_setup_scripts(executor, strategies, args.setup)

        inspector = SchemaInspector(executor)
        report.print_banner('TABLE STATISTICS', report.WIDE)
        report.print_table_stats({t: await inspector.count_rows(t) for t in COMPARISON_STAT_TABLES}, width=25)

        engine = ComparisonEngine(BenchmarkRunner(executor, iterations=args.iterations, warmup=args.warmup), inspector)
        for strategy in strategies:
            report.print_banner(f'PARTITION COMPARISON: {strategy.value.upper()}', report.WIDE)
            await engine.run(strategy, on_outcome=show)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_main(lambda: compare(args))


if __name__ == '__main__':
    raise SystemExit(main())
