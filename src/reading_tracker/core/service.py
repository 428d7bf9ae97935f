"""Progress service: read the book, flip one flag, return the chapter."""

from __future__ import annotations

from typing import Any

import structlog

from reading_tracker.core.errors import InvalidInputError, SubtopicNotFoundError
from reading_tracker.core.models import RESERVED_KEYS, Book, Chapter
from reading_tracker.core.progress import UserProgress, summarize
from reading_tracker.core.store import ProgressStore

logger = structlog.get_logger(__name__)


def validate_update(user: Any, subtopic_id: Any, completed: Any) -> None:
    """Check an update request's fields.

    Raises:
        InvalidInputError: If user or subtopic_id is blank or not a string,
            user is a reserved subtopic key ("id", "title"), or completed
            is not a bool (strings and ints are rejected)
    """
    if not isinstance(user, str) or not user.strip():
        raise InvalidInputError("user", "must be a non-empty string")
    if user in RESERVED_KEYS:
        raise InvalidInputError("user", f"'{user}' is a reserved subtopic key")
    if not isinstance(subtopic_id, str) or not subtopic_id.strip():
        raise InvalidInputError("subtopicId", "must be a non-empty string")
    if not isinstance(completed, bool):
        raise InvalidInputError("status", "must be a boolean")


class ProgressService:
    """Operations exposed over HTTP and the CLI."""

    def __init__(self, store: ProgressStore):
        self.store = store

    def get_tree(self) -> Book:
        return self.store.load_all()

    def update(self, user: Any, subtopic_id: Any, completed: Any) -> Chapter:
        """Set one user's completion flag on one subtopic.

        Args:
            user: Reader name
            subtopic_id: Subtopic identifier
            completed: New flag value, must be a real bool

        Returns:
            The chapter containing the subtopic, with the new value applied

        Raises:
            InvalidInputError: If any argument is missing or malformed
            SubtopicNotFoundError: If no subtopic has that id
            StoreError: If the store cannot be read or written
        """
        validate_update(user, subtopic_id, completed)

        book = self.store.load_all()
        chapter = book.find_chapter_for(subtopic_id)
        if chapter is None:
            logger.info("progress.subtopic_not_found", subtopic_id=subtopic_id)
            raise SubtopicNotFoundError(subtopic_id)

        self.store.set_completion(user, subtopic_id, completed)

        subtopic = chapter.get_subtopic(subtopic_id)
        subtopic.set_completed(user, completed)

        logger.info(
            "progress.updated",
            user=user,
            subtopic_id=subtopic_id,
            completed=completed,
            chapter=chapter.title,
        )
        return chapter

    def summary(self) -> list[UserProgress]:
        """Per-user overall and per-chapter progress."""
        return summarize(self.store.load_all())
