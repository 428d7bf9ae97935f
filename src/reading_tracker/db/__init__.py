"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization (users, chapters, subtopics, progress)
- SqliteProgressStore, the relational progress backend
"""

from reading_tracker.db.database import get_db, init_db, parse_database_url
from reading_tracker.db.progress_repository import SqliteProgressStore, load_seed_book

__all__ = [
    "get_db",
    "init_db",
    "parse_database_url",
    "SqliteProgressStore",
    "load_seed_book",
]
