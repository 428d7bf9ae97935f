"""Storage contract shared by the JSON and SQLite backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from reading_tracker.core.models import Book


@runtime_checkable
class ProgressStore(Protocol):
    """Durable holder of the book outline and per-user completion flags."""

    def initialize(self) -> None:
        """Prepare the backend before serving traffic (schema, seed data)."""
        ...

    def load_all(self) -> Book:
        """Load the full book with every user's flags.

        Raises:
            StoreUnavailableError: If the backend cannot be opened or parsed
        """
        ...

    def set_completion(self, user: str, subtopic_id: str, completed: bool) -> None:
        """Persist one (user, subtopic) flag.

        Raises:
            SubtopicNotFoundError: If subtopic_id is unknown
            StoreFailureError: If the write fails
        """
        ...
