import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Optional

from catalog import database
from catalog.book import Book

logger = logging.getLogger(__name__)

INSERT_BOOK = "INSERT INTO books (id, title, author, year, pages) VALUES (?, ?, ?, ?, ?)"
SELECT_ALL_BOOKS = "SELECT id, title, author, year, pages FROM books ORDER BY id"
SELECT_BOOK_BY_ID = "SELECT id, title, author, year, pages FROM books WHERE id = ?"
UPDATE_BOOK = "UPDATE books SET title = ?, author = ?, year = ?, pages = ? WHERE id = ?"
DELETE_BOOK = "DELETE FROM books WHERE id = ?"
COUNT_BOOKS = "SELECT COUNT(*) FROM books"
BOOK_EXISTS = "SELECT 1 FROM books WHERE id = ?"
SEARCH_BY_TITLE = (
    "SELECT id, title, author, year, pages FROM books "
    "WHERE title LIKE ? ESCAPE '\\' ORDER BY title, id"
)
SEARCH_BY_AUTHOR = (
    "SELECT id, title, author, year, pages FROM books "
    "WHERE author LIKE ? ESCAPE '\\' ORDER BY author, title"
)


class StorageError(Exception):
    """Raised when the database cannot be reached or rejects a statement."""


def _like_pattern(fragment: str) -> str:
    """Wrap a caller-supplied fragment in wildcards, matching it literally."""
    escaped = (
        fragment.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


class BookStore:
    """Issues the catalog's queries against the books table.

    Every method opens its own connection and releases it before returning,
    whether the statement succeeded or not. Any ``sqlite3.Error`` is re-raised
    as ``StorageError``, as are values the driver cannot bind (integers outside
    the 64-bit range, text that is not valid UTF-8).
    """

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        logger.debug(f"{operation}: opening connection to {self.db_file or database.DATABASE_FILE}")
        try:
            with database.connection(self.db_file) as conn:
                yield conn
        except (sqlite3.Error, OverflowError, UnicodeEncodeError) as e:
            logger.debug(f"{operation} failed: {e}")
            raise StorageError(str(e)) from e

    # ------------------------- Mutations ------------------------- #
    def insert(self, book: Book) -> bool:
        with self._connect("insert") as conn:
            cursor = conn.execute(
                INSERT_BOOK,
                (book.id, book.title, book.author, book.year, book.pages),
            )
            return cursor.rowcount == 1

    def update(self, book: Book) -> bool:
        with self._connect("update") as conn:
            cursor = conn.execute(
                UPDATE_BOOK,
                (book.title, book.author, book.year, book.pages, book.id),
            )
            return cursor.rowcount > 0

    def delete(self, book_id: int) -> bool:
        with self._connect("delete") as conn:
            cursor = conn.execute(DELETE_BOOK, (book_id,))
            return cursor.rowcount > 0

    # ------------------------- Reads ------------------------- #
    def get_all(self) -> List[Book]:
        with self._connect("get_all") as conn:
            rows = conn.execute(SELECT_ALL_BOOKS).fetchall()
            return [Book.from_row(row) for row in rows]

    def get_by_id(self, book_id: int) -> Optional[Book]:
        with self._connect("get_by_id") as conn:
            row = conn.execute(SELECT_BOOK_BY_ID, (book_id,)).fetchone()
            return Book.from_row(row) if row else None

    def count(self) -> int:
        with self._connect("count") as conn:
            row = conn.execute(COUNT_BOOKS).fetchone()
            return row[0] if row else 0

    def exists(self, book_id: int) -> bool:
        with self._connect("exists") as conn:
            return conn.execute(BOOK_EXISTS, (book_id,)).fetchone() is not None

    def search_by_title(self, fragment: str) -> List[Book]:
        """Books whose title contains ``fragment``, ordered by title."""
        with self._connect("search_by_title") as conn:
            rows = conn.execute(SEARCH_BY_TITLE, (_like_pattern(fragment),)).fetchall()
            return [Book.from_row(row) for row in rows]

    def search_by_author(self, fragment: str) -> List[Book]:
        """Books whose author contains ``fragment``, ordered by author then title."""
        with self._connect("search_by_author") as conn:
            rows = conn.execute(SEARCH_BY_AUTHOR, (_like_pattern(fragment),)).fetchall()
            return [Book.from_row(row) for row in rows]
