"""Book, chapter and subtopic models.

The wire format flattens per-user completion into user-named keys:

    {"id": "1.1", "title": "Overview", "Khare": true, "Roy": false}

In memory the flags live in an explicit ``completion`` mapping and are read
through ``Subtopic.is_completed`` so that a missing user reads as False.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_USERS = ("Khare", "Roy")

# Keys on a subtopic object that are never user names
RESERVED_KEYS = frozenset({"id", "title"})


@dataclass
class Subtopic:
    """Smallest trackable unit of reading progress."""

    id: str
    title: str
    completion: dict[str, bool] = field(default_factory=dict)

    def is_completed(self, user: str) -> bool:
        """Return the user's completion flag, False when absent."""
        return self.completion.get(user, False)

    def set_completed(self, user: str, completed: bool) -> None:
        self.completion[user] = completed

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.completion)
        # id and title always win over a flag stored under the same key
        data["id"] = self.id
        data["title"] = self.title
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subtopic:
        """Parse a subtopic; any non-reserved boolean key is a user flag.

        Raises:
            TypeError: If data is not an object
        """
        if not isinstance(data, dict):
            raise TypeError(f"subtopic must be an object, got {type(data).__name__}")
        completion = {
            key: value
            for key, value in data.items()
            if key not in RESERVED_KEYS and isinstance(value, bool)
        }
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            completion=completion,
        )


@dataclass
class Chapter:
    """A titled, ordered group of subtopics."""

    title: str
    subtopics: list[Subtopic] = field(default_factory=list)

    def get_subtopic(self, subtopic_id: str) -> Subtopic | None:
        for subtopic in self.subtopics:
            if subtopic.id == subtopic_id:
                return subtopic
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "chapter": self.title,
            "subtopics": [s.to_dict() for s in self.subtopics],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chapter:
        if not isinstance(data, dict):
            raise TypeError(f"chapter must be an object, got {type(data).__name__}")
        subtopics = data.get("subtopics", [])
        if not isinstance(subtopics, list):
            raise TypeError("'subtopics' must be a list")
        return cls(
            title=str(data["chapter"]),
            subtopics=[Subtopic.from_dict(s) for s in subtopics],
        )


@dataclass
class Book:
    """Ordered chapters plus the set of tracked users."""

    chapters: list[Chapter] = field(default_factory=list)
    users: list[str] = field(default_factory=lambda: list(DEFAULT_USERS))

    def __post_init__(self) -> None:
        # Every tracked user gets an explicit flag on every subtopic
        for chapter in self.chapters:
            for subtopic in chapter.subtopics:
                for user in self.users:
                    subtopic.completion.setdefault(user, False)

    def find_chapter_for(self, subtopic_id: str) -> Chapter | None:
        """Return the chapter containing the subtopic, or None."""
        for chapter in self.chapters:
            if chapter.get_subtopic(subtopic_id) is not None:
                return chapter
        return None

    def get_subtopic(self, subtopic_id: str) -> Subtopic | None:
        chapter = self.find_chapter_for(subtopic_id)
        if chapter is None:
            return None
        return chapter.get_subtopic(subtopic_id)

    def merge_chapter(self, updated: Chapter) -> bool:
        """Replace the chapter whose title matches ``updated``.

        Returns:
            True if a chapter was replaced, False if no title matched
        """
        for i, chapter in enumerate(self.chapters):
            if chapter.title == updated.title:
                self.chapters[i] = updated
                return True
        return False

    def subtopic_count(self) -> int:
        return sum(len(c.subtopics) for c in self.chapters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "users": list(self.users),
            "book": [c.to_dict() for c in self.chapters],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        default_users: list[str] | tuple[str, ...] = DEFAULT_USERS,
    ) -> Book:
        """Parse a book document.

        Args:
            data: Document with a ``book`` list and optional ``users`` list
            default_users: Users to track when the document names none

        Raises:
            KeyError, TypeError, ValueError: If the document shape is invalid
        """
        chapters_data = data["book"]
        if not isinstance(chapters_data, list):
            raise TypeError("'book' must be a list of chapters")

        users = data.get("users") or list(default_users)
        if not isinstance(users, (list, tuple)):
            raise TypeError("'users' must be a list of names")
        reserved = RESERVED_KEYS.intersection(users)
        if reserved:
            raise ValueError(f"Reserved names cannot be users: {sorted(reserved)}")
        return cls(
            chapters=[Chapter.from_dict(c) for c in chapters_data],
            users=[str(u) for u in users],
        )
