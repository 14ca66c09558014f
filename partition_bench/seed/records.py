from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Final, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

from partition_bench.enums import TableRole

GeneratedRecord: TypeAlias = tuple[Any, ...]

BASE_TIME: Final[datetime] = datetime(2020, 1, 1)
CREATED_AT_SPAN_HOURS: Final[int] = 5 * 365 * 24

TAG_CATEGORIES: Final[tuple[str, ...]] = (
    'Fiction', 'Non-Fiction', 'Science', 'History', 'Art', 'Technology', 'Philosophy',
    'Biography', 'Travel', 'Cooking', 'Health', 'Business', 'Education', 'Sports',
)
TITLE_PREFIXES: Final[tuple[str, ...]] = (
    'The Art of', 'Introduction to', 'Advanced', 'Complete Guide to', 'Mastering',
    'Understanding', 'Practical', 'Essential', 'Modern', 'Classic',
)
TITLE_SUBJECTS: Final[tuple[str, ...]] = (
    'Programming', 'Design', 'Science', 'History', 'Mathematics',
    'Physics', 'Chemistry', 'Biology', 'Economics', 'Philosophy',
)

# Which dependency counts a role draws foreign keys from.
DEPENDENCIES: Final[dict[TableRole, tuple[str, ...]]] = {
    TableRole.AUTHOR: (),
    TableRole.TAG: (),
    TableRole.BOOK: ('author',),
    TableRole.BOOK_TAG: ('book', 'tag'),
    TableRole.AUTHOR_TAG: ('author', 'tag'),
}


class SeedTarget(BaseModel):
    """How many rows one seeding phase generates and the id ranges its foreign keys may use."""

    model_config = ConfigDict(frozen=True)

    role: TableRole
    count: int = Field(ge=0)
    author_count: int = Field(default=0, ge=0)
    book_count: int = Field(default=0, ge=0)
    tag_count: int = Field(default=0, ge=0)

    @model_validator(mode='after')
    def _check_dependencies(self) -> SeedTarget:
        if self.count == 0:
            return self
        for dep in DEPENDENCIES[self.role]:
            if getattr(self, f'{dep}_count') < 1:
                raise ValueError(f'{self.role} rows need at least one {dep} to reference.')
        return self


def random_created_at(rng: random.Random) -> datetime:
    return BASE_TIME + timedelta(hours=rng.randrange(CREATED_AT_SPAN_HOURS))


def _author(rng: random.Random, index: int, target: SeedTarget) -> GeneratedRecord:
    return (f'Author {index + 1}', random_created_at(rng))


def _tag(rng: random.Random, index: int, target: SeedTarget) -> GeneratedRecord:
    return (f'{rng.choice(TAG_CATEGORIES)}-{index + 1}',)


def _book(rng: random.Random, index: int, target: SeedTarget) -> GeneratedRecord:
    title = f'{rng.choice(TITLE_PREFIXES)} {rng.choice(TITLE_SUBJECTS)} Vol.{index + 1}'
    return (title, rng.randint(1, target.author_count), random_created_at(rng))


def _book_tag(rng: random.Random, index: int, target: SeedTarget) -> GeneratedRecord:
    return (rng.randint(1, target.book_count), rng.randint(1, target.tag_count), random_created_at(rng))


def _author_tag(rng: random.Random, index: int, target: SeedTarget) -> GeneratedRecord:
    return (rng.randint(1, target.author_count), rng.randint(1, target.tag_count), random_created_at(rng))


@dataclass(frozen=True)
class TableLayout:
    table: str
    columns: tuple[str, ...]
    make_record: Callable[[random.Random, int, SeedTarget], GeneratedRecord]

    @property
    def width(self) -> int:
        return len(self.columns)


LAYOUTS: Final[dict[TableRole, TableLayout]] = {
    TableRole.AUTHOR: TableLayout('authors', ('name', 'created_at'), _author),
    TableRole.TAG: TableLayout('tags', ('name',), _tag),
    TableRole.BOOK: TableLayout('books', ('title', 'author_id', 'created_at'), _book),
    TableRole.BOOK_TAG: TableLayout('book_tags', ('book_id', 'tag_id', 'created_at'), _book_tag),
    TableRole.AUTHOR_TAG: TableLayout('author_tags', ('author_id', 'tag_id', 'created_at'), _author_tag),
}


def build_seed_plan(
    *,
    authors: int,
    tags: int,
    books: int,
    book_tags: int,
    author_tags: int,
) -> list[SeedTarget]:
    """
    < Build the seeding phases in dependency order >
    1. authors and tags have no foreign keys.
    2. books reference authors.
    3. book_tags and author_tags reference both sides of their association.
    """
    deps: dict[str, int] = {'author_count': authors, 'book_count': books, 'tag_count': tags}
    return [
        SeedTarget(role=TableRole.AUTHOR, count=authors),
        SeedTarget(role=TableRole.TAG, count=tags),
        SeedTarget(role=TableRole.BOOK, count=books, **deps),
        SeedTarget(role=TableRole.BOOK_TAG, count=book_tags, **deps),
        SeedTarget(role=TableRole.AUTHOR_TAG, count=author_tags, **deps),
    ]
