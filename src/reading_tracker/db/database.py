"""SQLite database connection and schema management.

Provides connection management and schema initialization for the
relational progress backend.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/progress.db")

# Seconds a connection waits on a locked database before failing
BUSY_TIMEOUT = 10.0


def parse_database_url(url: str | None) -> Path:
    """Resolve a database connection string to a file path.

    Accepts ``sqlite:///relative/path.db``, ``sqlite:////abs/path.db`` or a
    bare filesystem path.

    Raises:
        ValueError: If the URL names a scheme other than sqlite
    """
    if not url:
        return DEFAULT_DB_PATH

    if "://" not in url:
        return Path(url)

    scheme, _, rest = url.partition("://")
    if scheme != "sqlite":
        raise ValueError(f"Unsupported database scheme: {scheme}")

    # sqlite:///x -> "x", sqlite:////abs/x -> "/abs/x"
    path = rest[1:] if rest.startswith("/") else rest
    if not path:
        raise ValueError(f"Database URL has no path: {url}")
    return Path(path)


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/progress.db
    """
    db_path = db_path or DEFAULT_DB_PATH

    with get_db(db_path) as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(db_path))


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on any exception.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db(path) as conn:
            rows = conn.execute("SELECT * FROM chapters").fetchall()
    """
    db_path = db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency, so tables created by an older
    schema version are left as they are.
    """
    conn.executescript(
        """
        -- users: the fixed set of readers
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );

        -- chapters: title is the natural key, id keeps display order
        CREATE TABLE IF NOT EXISTS chapters (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL UNIQUE
        );

        -- subtopics: id comes from the seed outline and never changes
        CREATE TABLE IF NOT EXISTS subtopics (
            id TEXT PRIMARY KEY,
            chapter_id INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
            title TEXT NOT NULL,
            position INTEGER NOT NULL DEFAULT 0
        );

        -- progress: at most one row per (user, subtopic); no row means false
        CREATE TABLE IF NOT EXISTS progress (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            subtopic_id TEXT NOT NULL REFERENCES subtopics(id) ON DELETE CASCADE,
            completed INTEGER NOT NULL DEFAULT 0 CHECK(completed IN (0, 1)),
            updated_at TEXT NOT NULL DEFAULT (datetime('now')),
            UNIQUE(user_id, subtopic_id)
        );

        CREATE INDEX IF NOT EXISTS idx_subtopics_chapter ON subtopics(chapter_id, position);
        CREATE INDEX IF NOT EXISTS idx_progress_subtopic ON progress(subtopic_id);
        """
    )
