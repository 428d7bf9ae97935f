"""Error taxonomy for progress tracking.

Each error maps to one HTTP status in the web layer:
- InvalidInputError -> 400
- SubtopicNotFoundError -> 404
- StoreError (and subclasses) -> 500
"""


class ProgressError(Exception):
    """Base class for reading tracker errors."""


class InvalidInputError(ProgressError):
    """Raised when an update request has missing or malformed fields."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")


class SubtopicNotFoundError(ProgressError):
    """Raised when no subtopic with the given id exists in the book."""

    def __init__(self, subtopic_id: str):
        self.subtopic_id = subtopic_id
        super().__init__(f"Subtopic not found: {subtopic_id}")


class StoreError(ProgressError):
    """Base class for persistence failures."""


class StoreUnavailableError(StoreError):
    """Raised when the backing document or database cannot be opened or parsed."""


class StoreFailureError(StoreError):
    """Raised when a read or write against an open store fails."""
