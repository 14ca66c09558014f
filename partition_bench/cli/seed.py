from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from partition_bench.cli._common import (
    add_connection_args,
    configure_logging,
    open_executor,
    run_main,
    settings_from_args,
)
from partition_bench.models import create_tables
from partition_bench.seed.batch import DEFAULT_BATCH_SIZE
from partition_bench.seed.pool import DEFAULT_WORKERS
from partition_bench.seed.progress import DEFAULT_INTERVAL_SECONDS
from partition_bench.seed.records import build_seed_plan
from partition_bench.seed.seeder import Seeder, run_seeding, truncate_tables
from partition_bench.seed.tracker import DEFAULT_TRACKER_THRESHOLD

logger = logging.getLogger(__name__)

DEFAULT_AUTHORS = 10_000
DEFAULT_BOOKS = 1_000_000
DEFAULT_TAGS = 1_000
DEFAULT_BOOK_TAGS = 5_000_000
DEFAULT_AUTHOR_TAGS = 50_000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pb-seed', description='Populate the book schema with synthetic rows.')
    add_connection_args(parser)
    parser.add_argument('--authors', type=int, default=DEFAULT_AUTHORS, help='Number of authors to insert')
    parser.add_argument('--books', type=int, default=DEFAULT_BOOKS, help='Number of books to insert')
    parser.add_argument('--tags', type=int, default=DEFAULT_TAGS, help='Number of tags to insert')
    parser.add_argument('--book-tags', type=int, default=DEFAULT_BOOK_TAGS, help='Number of book-tag associations')
    parser.add_argument(
        '--author-tags', type=int, default=DEFAULT_AUTHOR_TAGS, help='Number of author-tag associations'
    )
    parser.add_argument('--workers', type=int, default=DEFAULT_WORKERS, help='Parallel workers per phase')
    parser.add_argument('--batch-size', type=int, default=DEFAULT_BATCH_SIZE, help='Records per INSERT statement')
    parser.add_argument(
        '--tracker-threshold',
        type=int,
        default=DEFAULT_TRACKER_THRESHOLD,
        help='Association keys remembered per worker before the duplicate window is cleared',
    )
    parser.add_argument(
        '--interval', type=float, default=DEFAULT_INTERVAL_SECONDS, help='Seconds between progress lines'
    )
    parser.add_argument('--seed', type=int, help='Random seed for a reproducible data set')
    parser.add_argument('--truncate', action='store_true', help='Truncate tables before seeding')
    parser.add_argument('--create-tables', action='store_true', help='Create missing tables before seeding')
    return parser


async def seed(args: argparse.Namespace) -> None:
    plan = build_seed_plan(
        authors=args.authors,
        tags=args.tags,
        books=args.books,
        book_tags=args.book_tags,
        author_tags=args.author_tags,
    )

    async with open_executor(settings_from_args(args), workers=args.workers) as executor:
        if args.create_tables:
            await create_tables(executor.engine)

        if args.truncate:
            logger.info('Truncating tables...')
            await truncate_tables(executor)

        seeder = Seeder(
            executor,
            workers=args.workers,
            batch_size=args.batch_size,
            tracker_threshold=args.tracker_threshold,
            seed=args.seed,
        )
        summary = await run_seeding(seeder, plan, interval=args.interval)

    for phase in summary.phases:
        if phase.dropped or phase.failed_batches:
            logger.info(
                '%s: %d duplicate pair(s) dropped, %d batch(es) failed',
                phase.target.role,
                phase.dropped,
                phase.failed_batches,
            )
    logger.info(summary.format())


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_main(lambda: seed(args))


if __name__ == '__main__':
    raise SystemExit(main())
