from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from partition_bench.enums import IdSpace, ParamKind, PartitionStrategy
from partition_bench.executor import count_placeholders


@dataclass(frozen=True)
class QuerySpec:
    """
    A benchmark query plus the metadata needed to randomize its parameters.

    `id_space` names the table whose current max id bounds the drawn values.
    `params` says whether the query takes no value, one id, or an id range [x, x + span].
    """

    name: str
    sql: str
    id_space: IdSpace | None = None
    params: ParamKind = ParamKind.NONE

    def __post_init__(self) -> None:
        found = count_placeholders(self.sql)
        if found != self.params.placeholder_count:
            raise ValueError(
                f'{self.name!r}: {self.params} query needs {self.params.placeholder_count} placeholder(s), found {found}.'
            )
        if self.params is not ParamKind.NONE and self.id_space is None:
            raise ValueError(f'{self.name!r}: parameterized query needs an id_space.')


@dataclass(frozen=True)
class QueryPair:
    """The same question asked of the unpartitioned table and of its partitioned copy."""

    name: str
    description: str
    baseline: QuerySpec
    partitioned: QuerySpec
    partitioned_table: str
    strategy: PartitionStrategy

    def applies_to(self, strategy: PartitionStrategy) -> bool:
        return self.strategy in (strategy, PartitionStrategy.ALL)


def pair(
    name: str,
    description: str,
    baseline_sql: str,
    partitioned_sql: str,
    partitioned_table: str,
    strategy: PartitionStrategy,
) -> QueryPair:
    return QueryPair(
        name=name,
        description=description,
        baseline=QuerySpec('No Partition', baseline_sql),
        partitioned=QuerySpec('With Partition', partitioned_sql),
        partitioned_table=partitioned_table,
        strategy=strategy,
    )


BENCHMARK_QUERIES: Final[tuple[QuerySpec, ...]] = (
    QuerySpec(
        'Simple SELECT with LIMIT',
        'SELECT id, title, author_id, created_at FROM books ORDER BY id LIMIT 1000',
    ),
    QuerySpec(
        'Primary key lookup',
        'SELECT id, title, author_id, created_at FROM books WHERE id = ?',
        IdSpace.BOOK,
        ParamKind.SINGLE,
    ),
    QuerySpec(
        'Date range query (1 month)',
        "SELECT id, title, author_id, created_at FROM books WHERE created_at BETWEEN '2022-06-01' AND '2022-06-30'",
    ),
    QuerySpec(
        'Date range query (1 year)',
        "SELECT id, title, author_id, created_at FROM books WHERE created_at BETWEEN '2022-01-01' AND '2022-12-31'",
    ),
    QuerySpec(
        'Author lookup with books count',
        'SELECT a.id, a.name, COUNT(b.id) AS book_count FROM authors a '
        'LEFT JOIN books b ON a.id = b.author_id WHERE a.id = ? GROUP BY a.id, a.name',
        IdSpace.AUTHOR,
        ParamKind.SINGLE,
    ),
    QuerySpec(
        'JOIN books with authors',
        'SELECT b.id, b.title, a.name AS author_name FROM books b '
        'INNER JOIN authors a ON b.author_id = a.id ORDER BY b.id LIMIT 1000',
    ),
    QuerySpec(
        'Books with specific tag',
        'SELECT b.id, b.title FROM books b INNER JOIN book_tags bt ON b.id = bt.book_id WHERE bt.tag_id = ?',
        IdSpace.TAG,
        ParamKind.SINGLE,
    ),
    QuerySpec(
        'Count books by author (TOP 10)',
        'SELECT author_id, COUNT(*) AS cnt FROM books GROUP BY author_id ORDER BY cnt DESC LIMIT 10',
    ),
    QuerySpec(
        'Count books by year',
        'SELECT YEAR(created_at) AS year, COUNT(*) AS cnt FROM books GROUP BY YEAR(created_at) ORDER BY year',
    ),
    QuerySpec(
        'Full table count',
        'SELECT COUNT(*) FROM books',
    ),
    QuerySpec(
        'Count with date filter',
        "SELECT COUNT(*) FROM books WHERE created_at >= '2023-01-01'",
    ),
    QuerySpec(
        'Complex JOIN (books -> tags)',
        'SELECT b.id, b.title, GROUP_CONCAT(t.name) AS tags FROM books b '
        'INNER JOIN book_tags bt ON b.id = bt.book_id INNER JOIN tags t ON bt.tag_id = t.id '
        'WHERE b.id BETWEEN ? AND ? GROUP BY b.id, b.title',
        IdSpace.BOOK,
        ParamKind.RANGE,
    ),
    QuerySpec(
        'Subquery: Books by prolific authors',
        'SELECT id, title FROM books WHERE author_id IN '
        '(SELECT author_id FROM books GROUP BY author_id HAVING COUNT(*) > 100) LIMIT 1000',
    ),
)


COMPARISON_PAIRS: Final[tuple[QueryPair, ...]] = (
    # HASH
    pair(
        'Primary Key Lookup (single row)',
        'SELECT by id - should benefit from HASH partition pruning',
        'SELECT id, title, author_id, created_at FROM books WHERE id = 500',
        'SELECT id, title, author_id, created_at FROM books_hash WHERE id = 500',
        'books_hash',
        PartitionStrategy.HASH,
    ),
    pair(
        'Full Table Scan',
        'SELECT all - partition overhead comparison',
        'SELECT COUNT(*) FROM books',
        'SELECT COUNT(*) FROM books_hash',
        'books_hash',
        PartitionStrategy.HASH,
    ),
    pair(
        'Range Scan by ID',
        'SELECT id range - HASH may scan all partitions',
        'SELECT id, title FROM books WHERE id BETWEEN 100 AND 500',
        'SELECT id, title FROM books_hash WHERE id BETWEEN 100 AND 500',
        'books_hash',
        PartitionStrategy.HASH,
    ),
    pair(
        'JOIN with book_tags',
        'JOIN operation - partition alignment matters',
        'SELECT b.id, b.title, COUNT(bt.tag_id) FROM books b LEFT JOIN book_tags bt ON b.id = bt.book_id '
        'WHERE b.id BETWEEN 1 AND 100 GROUP BY b.id, b.title',
        'SELECT b.id, b.title, COUNT(bt.tag_id) FROM books_hash b LEFT JOIN book_tags_hash bt ON b.id = bt.book_id '
        'WHERE b.id BETWEEN 1 AND 100 GROUP BY b.id, b.title',
        'books_hash',
        PartitionStrategy.HASH,
    ),
    # RANGE by year
    pair(
        'Date Range Query (1 year)',
        'SELECT by date range - RANGE partition pruning',
        "SELECT id, title, created_at FROM books WHERE created_at BETWEEN '2022-01-01' AND '2022-12-31'",
        "SELECT id, title, created_at FROM books_range_year WHERE created_at BETWEEN '2022-01-01' AND '2022-12-31'",
        'books_range_year',
        PartitionStrategy.RANGE_YEAR,
    ),
    pair(
        'Date Range Query (1 month)',
        'SELECT by specific month - single partition access',
        "SELECT id, title, created_at FROM books WHERE created_at BETWEEN '2022-06-01' AND '2022-06-30'",
        "SELECT id, title, created_at FROM books_range_year WHERE created_at BETWEEN '2022-06-01' AND '2022-06-30'",
        'books_range_year',
        PartitionStrategy.RANGE_YEAR,
    ),
    pair(
        'Count by Year',
        'GROUP BY year - partition-wise aggregation',
        'SELECT YEAR(created_at) AS y, COUNT(*) FROM books GROUP BY YEAR(created_at)',
        'SELECT YEAR(created_at) AS y, COUNT(*) FROM books_range_year GROUP BY YEAR(created_at)',
        'books_range_year',
        PartitionStrategy.RANGE_YEAR,
    ),
    pair(
        'Cross-Year Query',
        'SELECT across multiple years - multiple partitions',
        "SELECT id, title FROM books WHERE created_at >= '2021-06-01' AND created_at < '2023-06-01' LIMIT 1000",
        "SELECT id, title FROM books_range_year WHERE created_at >= '2021-06-01' AND created_at < '2023-06-01' LIMIT 1000",
        'books_range_year',
        PartitionStrategy.RANGE_YEAR,
    ),
    # RANGE by id
    pair(
        'ID Range (within partition)',
        'SELECT id range within single partition boundary',
        'SELECT id, title FROM books WHERE id BETWEEN 50000 AND 99999',
        'SELECT id, title FROM books_range_id WHERE id BETWEEN 50000 AND 99999',
        'books_range_id',
        PartitionStrategy.RANGE_ID,
    ),
    pair(
        'ID Range (cross partition)',
        'SELECT id range across partition boundaries',
        'SELECT id, title FROM books WHERE id BETWEEN 95000 AND 105000',
        'SELECT id, title FROM books_range_id WHERE id BETWEEN 95000 AND 105000',
        'books_range_id',
        PartitionStrategy.RANGE_ID,
    ),
    # LIST
    pair(
        'Status Filter (single value)',
        'SELECT by status - single partition access',
        'SELECT COUNT(*) FROM books',
        'SELECT COUNT(*) FROM books_list WHERE status = 1',
        'books_list',
        PartitionStrategy.LIST,
    ),
    pair(
        'Status Filter (multiple values)',
        'SELECT by multiple statuses',
        'SELECT COUNT(*) FROM books',
        'SELECT COUNT(*) FROM books_list WHERE status IN (0, 1)',
        'books_list',
        PartitionStrategy.LIST,
    ),
    # KEY
    pair(
        'Composite Key Lookup',
        'SELECT by composite key - KEY partition optimization',
        'SELECT * FROM book_tags WHERE book_id = 100 AND tag_id = 5',
        'SELECT * FROM book_tags_key WHERE book_id = 100 AND tag_id = 5',
        'book_tags_key',
        PartitionStrategy.KEY,
    ),
    pair(
        'Partial Key Lookup',
        'SELECT by partial key - may scan all partitions',
        'SELECT * FROM book_tags WHERE book_id = 100',
        'SELECT * FROM book_tags_key WHERE book_id = 100',
        'book_tags_key',
        PartitionStrategy.KEY,
    ),
)


# Per-strategy DDL scripts looked up in the directory given to --setup.
SETUP_SCRIPTS: Final[dict[PartitionStrategy, str]] = {
    PartitionStrategy.HASH: 'hash.sql',
    PartitionStrategy.RANGE_YEAR: 'range_by_year.sql',
    PartitionStrategy.RANGE_ID: 'range_by_id.sql',
    PartitionStrategy.LIST: 'list.sql',
    PartitionStrategy.KEY: 'key.sql',
}

COMPARISON_STAT_TABLES: Final[tuple[str, ...]] = (
    'books', 'books_hash', 'books_range_year', 'books_range_id', 'books_list', 'books_key',
    'book_tags', 'book_tags_hash', 'book_tags_range_year', 'book_tags_range_id', 'book_tags_key',
)
