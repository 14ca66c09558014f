from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Author(Base):
    __tablename__ = 'authors'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class Tag(Base):
    __tablename__ = 'tags'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Book(Base):
    __tablename__ = 'books'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey('authors.id'), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)


class BookTag(Base):
    """Association row. The composite primary key is what makes insert-or-ignore deduplicate globally."""

    __tablename__ = 'book_tags'

    book_id: Mapped[int] = mapped_column(ForeignKey('books.id'), primary_key=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey('tags.id'), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class AuthorTag(Base):
    __tablename__ = 'author_tags'

    author_id: Mapped[int] = mapped_column(ForeignKey('authors.id'), primary_key=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey('tags.id'), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# Child tables first, so TRUNCATE / DELETE never trips a foreign key.
TRUNCATE_ORDER = ('book_tags', 'author_tags', 'books', 'tags', 'authors')
STAT_TABLES = ('authors', 'books', 'tags', 'book_tags', 'author_tags')


async def create_tables(engine: AsyncEngine) -> None:
    """Create the book schema tables that are missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
