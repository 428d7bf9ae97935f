"""Single-document JSON backend.

The whole book lives in one file (default ``data/progress.json``) with the
same shape the API returns. Writes replace the whole file; concurrent writers
race and the last one wins.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path

import structlog

from reading_tracker.core.errors import (
    StoreFailureError,
    StoreUnavailableError,
    SubtopicNotFoundError,
)
from reading_tracker.core.models import DEFAULT_USERS, Book

logger = structlog.get_logger(__name__)

DEFAULT_PROGRESS_FILE = Path("data/progress.json")


class JsonProgressStore:
    """Progress store backed by a single JSON document."""

    def __init__(
        self,
        path: Path | None = None,
        seed_path: Path | None = None,
        users: list[str] | tuple[str, ...] = DEFAULT_USERS,
    ):
        self.path = path or DEFAULT_PROGRESS_FILE
        self.seed_path = seed_path
        self.users = list(users)

    def initialize(self) -> None:
        """Copy the seed document into place if no progress file exists yet."""
        if self.path.exists():
            logger.debug("json_store.ready", path=str(self.path))
            return

        if self.seed_path is None or not self.seed_path.exists():
            logger.warning(
                "json_store.missing",
                path=str(self.path),
                seed=str(self.seed_path) if self.seed_path else None,
            )
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.seed_path, self.path)
        logger.info("json_store.seeded", path=str(self.path), seed=str(self.seed_path))

    def load_all(self) -> Book:
        """Read and parse the progress document.

        Raises:
            StoreUnavailableError: If the file is missing or malformed
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return Book.from_dict(data, default_users=self.users)
        except FileNotFoundError as e:
            logger.error("progress.read_failed", path=str(self.path), error="missing")
            raise StoreUnavailableError(f"Progress file not found: {self.path}") from e
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("progress.read_failed", path=str(self.path), error=str(e))
            raise StoreUnavailableError(f"Progress file unreadable: {self.path}") from e

    def save(self, book: Book) -> None:
        """Overwrite the document with the given book.

        The data is written to a uniquely named sibling temp file and renamed
        over the target.

        Raises:
            StoreFailureError: If the file cannot be written
        """
        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=self.path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                json.dump(book.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            logger.error("progress.write_failed", path=str(self.path), error=str(e))
            raise StoreFailureError(f"Failed to write {self.path}") from e

        logger.debug("progress.saved", path=str(self.path))

    def set_completion(self, user: str, subtopic_id: str, completed: bool) -> None:
        book = self.load_all()
        subtopic = book.get_subtopic(subtopic_id)
        if subtopic is None:
            raise SubtopicNotFoundError(subtopic_id)

        subtopic.set_completed(user, completed)
        self.save(book)
