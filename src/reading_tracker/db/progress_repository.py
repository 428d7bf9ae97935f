"""Relational progress backend on SQLite.

Tables: users, chapters, subtopics, progress (see database.py).
The book is rebuilt on every read by joining the four tables; a missing
progress row reads as "not completed".
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import structlog

from reading_tracker.core.errors import (
    StoreFailureError,
    StoreUnavailableError,
    SubtopicNotFoundError,
)
from reading_tracker.core.models import DEFAULT_USERS, Book, Chapter, Subtopic
from reading_tracker.db.database import DEFAULT_DB_PATH, get_db, init_db

logger = structlog.get_logger(__name__)

_UPSERT_PROGRESS = """
    INSERT INTO progress (user_id, subtopic_id, completed, updated_at)
    VALUES ((SELECT id FROM users WHERE name = ?), ?, ?, datetime('now'))
    ON CONFLICT(user_id, subtopic_id) DO UPDATE SET
        completed = excluded.completed,
        updated_at = excluded.updated_at
"""

_DELETE_EMPTY_DUPLICATE_CHAPTERS = """
    DELETE FROM chapters
    WHERE id IN (
        SELECT c.id FROM chapters c
        WHERE EXISTS (
            SELECT 1 FROM chapters older
            WHERE older.title = c.title AND older.id < c.id
        )
        AND NOT EXISTS (
            SELECT 1 FROM subtopics s WHERE s.chapter_id = c.id
        )
    )
"""


class SqliteProgressStore:
    """Progress store backed by a normalized SQLite schema."""

    def __init__(
        self,
        db_path: Path | None = None,
        seed_path: Path | None = None,
        users: list[str] | tuple[str, ...] = DEFAULT_USERS,
    ):
        self.db_path = db_path or DEFAULT_DB_PATH
        self.seed_path = seed_path
        self.users = list(users)

    def initialize(self) -> None:
        """Create the schema, drop stale duplicate chapters and seed.

        Safe to run on every startup.
        """
        try:
            init_db(self.db_path)
            self.cleanup_duplicate_chapters()
        except sqlite3.Error as e:
            logger.error("database.init_failed", path=str(self.db_path), error=str(e))
            raise StoreUnavailableError(f"Cannot initialize {self.db_path}") from e

        if self.seed_path is None or not self.seed_path.exists():
            logger.warning(
                "database.seed_missing",
                seed=str(self.seed_path) if self.seed_path else None,
            )
            self.seed(Book(chapters=[], users=self.users))
            return

        self.seed(load_seed_book(self.seed_path, self.users))

    def seed(self, book: Book) -> None:
        """Insert users, chapters, subtopics and true flags that are missing.

        Existing rows are reused and existing progress is never overwritten,
        so running the seed twice leaves the tables unchanged.

        Args:
            book: Seed outline; only True completion flags create progress rows
        """
        users_added = chapters_added = subtopics_added = progress_added = 0

        try:
            with get_db(self.db_path) as conn:
                for name in _unique([*self.users, *book.users]):
                    users_added += _ensure_user(conn, name)

                for chapter in book.chapters:
                    chapter_id, created = _ensure_chapter(conn, chapter.title)
                    chapters_added += created

                    for position, subtopic in enumerate(chapter.subtopics):
                        cursor = conn.execute(
                            """
                            INSERT OR IGNORE INTO subtopics (id, chapter_id, title, position)
                            VALUES (?, ?, ?, ?)
                            """,
                            (subtopic.id, chapter_id, subtopic.title, position),
                        )
                        subtopics_added += cursor.rowcount

                        for user, completed in subtopic.completion.items():
                            if not completed:
                                continue
                            _ensure_user(conn, user)
                            cursor = conn.execute(
                                """
                                INSERT OR IGNORE INTO progress (user_id, subtopic_id, completed)
                                VALUES ((SELECT id FROM users WHERE name = ?), ?, 1)
                                """,
                                (user, subtopic.id),
                            )
                            progress_added += cursor.rowcount
        except sqlite3.Error as e:
            logger.error("database.seed_failed", path=str(self.db_path), error=str(e))
            raise StoreFailureError(f"Failed to seed {self.db_path}") from e

        logger.info(
            "database.seeded",
            users_added=users_added,
            chapters_added=chapters_added,
            subtopics_added=subtopics_added,
            progress_added=progress_added,
        )

    def cleanup_duplicate_chapters(self) -> int:
        """Delete empty chapter rows whose title also exists with a lower id.

        Databases created before chapter titles were unique can hold such rows.

        Returns:
            Number of chapter rows deleted
        """
        with get_db(self.db_path) as conn:
            cursor = conn.execute(_DELETE_EMPTY_DUPLICATE_CHAPTERS)

        removed = cursor.rowcount
        if removed:
            logger.info("database.duplicate_chapters_removed", count=removed)
        return removed

    def load_all(self) -> Book:
        """Rebuild the book from the four tables.

        Chapters keep insertion order, subtopics keep their seeded position.
        Chapters without subtopics are left out.

        Raises:
            StoreUnavailableError: If the database cannot be read
        """
        try:
            with get_db(self.db_path) as conn:
                users = [
                    row["name"]
                    for row in conn.execute("SELECT name FROM users ORDER BY id")
                ]
                rows = conn.execute(
                    """
                    SELECT c.title AS chapter_title,
                           s.id AS subtopic_id,
                           s.title AS subtopic_title
                    FROM chapters c
                    JOIN subtopics s ON s.chapter_id = c.id
                    ORDER BY c.id, s.position, s.rowid
                    """
                ).fetchall()
                flags = conn.execute(
                    """
                    SELECT u.name AS user_name, p.subtopic_id, p.completed
                    FROM progress p
                    JOIN users u ON u.id = p.user_id
                    """
                ).fetchall()
        except sqlite3.Error as e:
            logger.error("progress.read_failed", path=str(self.db_path), error=str(e))
            raise StoreUnavailableError(f"Cannot read {self.db_path}") from e

        completion: dict[str, dict[str, bool]] = {}
        for row in flags:
            completion.setdefault(row["subtopic_id"], {})[row["user_name"]] = bool(
                row["completed"]
            )

        # The inner join already drops chapters that have no subtopics
        chapters: list[Chapter] = []
        by_title: dict[str, Chapter] = {}
        for row in rows:
            chapter = by_title.get(row["chapter_title"])
            if chapter is None:
                chapter = Chapter(title=row["chapter_title"])
                by_title[chapter.title] = chapter
                chapters.append(chapter)
            chapter.subtopics.append(
                Subtopic(
                    id=row["subtopic_id"],
                    title=row["subtopic_title"],
                    completion=dict(completion.get(row["subtopic_id"], {})),
                )
            )

        return Book(chapters=chapters, users=users or list(self.users))

    def set_completion(self, user: str, subtopic_id: str, completed: bool) -> None:
        """Upsert the (user, subtopic) progress row in one transaction.

        Unknown user names are added to the users table first.

        Raises:
            SubtopicNotFoundError: If subtopic_id is not in the subtopics table
            StoreFailureError: If the write fails
        """
        try:
            with get_db(self.db_path) as conn:
                # Take the write lock before reading so check and upsert are one unit
                conn.execute("BEGIN IMMEDIATE")
                exists = conn.execute(
                    "SELECT 1 FROM subtopics WHERE id = ?", (subtopic_id,)
                ).fetchone()
                if exists is None:
                    raise SubtopicNotFoundError(subtopic_id)

                _ensure_user(conn, user)
                conn.execute(_UPSERT_PROGRESS, (user, subtopic_id, int(completed)))
        except sqlite3.Error as e:
            logger.error(
                "progress.write_failed",
                user=user,
                subtopic_id=subtopic_id,
                error=str(e),
            )
            raise StoreFailureError(f"Failed to update {subtopic_id} for {user}") from e

        logger.debug(
            "progress.row_upserted",
            user=user,
            subtopic_id=subtopic_id,
            completed=completed,
        )

    def count_rows(self, table: str) -> int:
        """Return the row count of one of the four tables."""
        if table not in ("users", "chapters", "subtopics", "progress"):
            raise ValueError(f"Unknown table: {table}")
        with get_db(self.db_path) as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def load_seed_book(
    seed_path: Path, users: list[str] | tuple[str, ...] = DEFAULT_USERS
) -> Book:
    """Parse the static seed outline.

    Raises:
        StoreUnavailableError: If the seed file is unreadable or malformed
    """
    try:
        with open(seed_path, encoding="utf-8") as f:
            data = json.load(f)
        return Book.from_dict(data, default_users=users)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error("database.seed_unreadable", seed=str(seed_path), error=str(e))
        raise StoreUnavailableError(f"Seed file unreadable: {seed_path}") from e


def _ensure_user(conn: sqlite3.Connection, name: str) -> int:
    """Insert the user if missing. Returns 1 if a row was added."""
    cursor = conn.execute("INSERT OR IGNORE INTO users (name) VALUES (?)", (name,))
    return cursor.rowcount


def _ensure_chapter(conn: sqlite3.Connection, title: str) -> tuple[int, bool]:
    """Find a chapter by title or insert it.

    Returns:
        (chapter_id, created)
    """
    row = conn.execute(
        "SELECT id FROM chapters WHERE title = ? ORDER BY id LIMIT 1", (title,)
    ).fetchone()
    if row is not None:
        return row["id"], False

    cursor = conn.execute("INSERT INTO chapters (title) VALUES (?)", (title,))
    return cursor.lastrowid, True


def _unique(names: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)
