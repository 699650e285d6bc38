import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from config import settings

logger = logging.getLogger(__name__)

# Default database file. LIBRARY_DB_FILE (via .env or the environment) overrides it.
# Callers may also pass db_file explicitly, or reassign database.DATABASE_FILE
# before the first connection is opened.
DATABASE_FILE = settings.database_file

CREATE_BOOKS_TABLE = """
    CREATE TABLE IF NOT EXISTS books (
        id INTEGER PRIMARY KEY,
        title VARCHAR(255) NOT NULL,
        author VARCHAR(255) NOT NULL,
        year INTEGER NOT NULL,
        pages INTEGER NOT NULL
    )
"""


def _resolve(db_file: Optional[str]) -> str:
    return db_file or DATABASE_FILE


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Open a new connection to the SQLite database.

    No pooling: every call returns a fresh connection which the caller owns
    and must close. Prefer ``connection()`` which does that for you.
    """
    conn = sqlite3.connect(_resolve(db_file))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def connection(db_file: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Scoped connection: commit on success, roll back on error, always close."""
    conn = get_db_connection(db_file)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def create_tables(db_file: Optional[str] = None) -> None:
    """Create the books table if it does not exist yet."""
    with connection(db_file) as conn:
        conn.execute(CREATE_BOOKS_TABLE)
    logger.info(f"Books table created or verified in {_resolve(db_file)}")


def test_connection(db_file: Optional[str] = None) -> bool:
    """Return True when the database can be opened and queried."""
    try:
        with connection(db_file) as conn:
            conn.execute("SELECT 1").fetchone()
        return True
    except sqlite3.Error as e:
        logger.error(f"Database connection test failed: {e}")
        return False


def initialize_database(db_file: Optional[str] = None) -> None:
    """Prepare the database for use; safe to call on every start."""
    create_tables(db_file)
