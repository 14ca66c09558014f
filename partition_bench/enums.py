from enum import Enum


class DBKind(str, Enum):
    MYSQL = 'mysql'
    POSTGRES = 'postgres'
    SQLITE = 'sqlite'

    def __str__(self):
        return self.value


class TableRole(str, Enum):
    AUTHOR = 'author'
    TAG = 'tag'
    BOOK = 'book'
    BOOK_TAG = 'book_tag'
    AUTHOR_TAG = 'author_tag'

    def __str__(self):
        return self.value

    @property
    def is_association(self) -> bool:
        return self in (TableRole.BOOK_TAG, TableRole.AUTHOR_TAG)


class IdSpace(str, Enum):
    """Table whose id range bounds a randomized query parameter."""

    AUTHOR = 'authors'
    BOOK = 'books'
    TAG = 'tags'

    def __str__(self):
        return self.value


class ParamKind(str, Enum):
    NONE = 'none'
    SINGLE = 'single'
    RANGE = 'range'

    def __str__(self):
        return self.value

    @property
    def placeholder_count(self) -> int:
        return {ParamKind.NONE: 0, ParamKind.SINGLE: 1, ParamKind.RANGE: 2}[self]


class PartitionStrategy(str, Enum):
    HASH = 'hash'
    RANGE_YEAR = 'range_year'
    RANGE_ID = 'range_id'
    LIST = 'list'
    KEY = 'key'
    ALL = 'all'

    def __str__(self):
        return self.value

    @classmethod
    def expand(cls, value: 'PartitionStrategy | str') -> list['PartitionStrategy']:
        strategy = cls(value)
        if strategy is cls.ALL:
            return [s for s in cls if s is not cls.ALL]
        return [strategy]
