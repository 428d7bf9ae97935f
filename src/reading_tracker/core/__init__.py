"""Core progress tracking logic: models, aggregation, stores and service."""

from reading_tracker.core.errors import (
    InvalidInputError,
    ProgressError,
    StoreError,
    StoreFailureError,
    StoreUnavailableError,
    SubtopicNotFoundError,
)
from reading_tracker.core.json_store import JsonProgressStore
from reading_tracker.core.models import DEFAULT_USERS, Book, Chapter, Subtopic
from reading_tracker.core.progress import (
    ChapterProgress,
    UserProgress,
    book_percentage,
    chapter_percentage,
    percentage,
    summarize,
)
from reading_tracker.core.service import ProgressService
from reading_tracker.core.store import ProgressStore

__all__ = [
    "InvalidInputError",
    "ProgressError",
    "StoreError",
    "StoreFailureError",
    "StoreUnavailableError",
    "SubtopicNotFoundError",
    "JsonProgressStore",
    "DEFAULT_USERS",
    "Book",
    "Chapter",
    "Subtopic",
    "ChapterProgress",
    "UserProgress",
    "book_percentage",
    "chapter_percentage",
    "percentage",
    "summarize",
    "ProgressService",
    "ProgressStore",
]
