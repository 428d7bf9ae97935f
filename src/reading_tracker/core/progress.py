"""Completion percentages per chapter and per book.

Book-level percentages are weighted by subtopic, not averaged over chapters:
a user who finished 3 of 4 subtopics in one chapter and 0 of 1 in another is
at 60%, not 38%.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reading_tracker.core.models import Book, Chapter


@dataclass
class ChapterProgress:
    """One user's progress through one chapter."""

    chapter: str
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return percentage(self.completed, self.total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "chapter": self.chapter,
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass
class UserProgress:
    """One user's progress through the whole book."""

    user: str
    completed: int
    total: int
    chapters: list[ChapterProgress] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        return percentage(self.completed, self.total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user,
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
            "chapters": [c.to_dict() for c in self.chapters],
        }


def percentage(completed: int, total: int) -> int:
    """Integer percentage rounded to nearest, halves rounded up.

    Returns 0 when total is 0.
    """
    if total <= 0:
        return 0
    # Integer form of floor(100 * completed / total + 0.5)
    return (200 * completed + total) // (2 * total)


def count_completed(chapter: Chapter, user: str) -> int:
    return sum(1 for s in chapter.subtopics if s.is_completed(user))


def chapter_percentage(chapter: Chapter, user: str) -> int:
    """Percentage of the chapter's subtopics completed by user."""
    return percentage(count_completed(chapter, user), len(chapter.subtopics))


def book_percentage(book: Book, user: str) -> int:
    """Subtopic-weighted percentage across all chapters."""
    completed = sum(count_completed(c, user) for c in book.chapters)
    return percentage(completed, book.subtopic_count())


def summarize(book: Book) -> list[UserProgress]:
    """Build the per-user progress view rendered by clients.

    Args:
        book: Book to summarize

    Returns:
        One UserProgress per tracked user, in the book's user order
    """
    summaries = []
    for user in book.users:
        chapters = [
            ChapterProgress(
                chapter=c.title,
                completed=count_completed(c, user),
                total=len(c.subtopics),
            )
            for c in book.chapters
        ]
        summaries.append(
            UserProgress(
                user=user,
                completed=sum(c.completed for c in chapters),
                total=sum(c.total for c in chapters),
                chapters=chapters,
            )
        )
    return summaries
