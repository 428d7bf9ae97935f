"""Pydantic schemas for Web API.

Serialization models for the book tree, progress updates, summaries and
health checks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# BOOK SCHEMAS
# =============================================================================


class SubtopicResponse(BaseModel):
    """A subtopic with one boolean key per tracked user.

    Example: {"id": "1.1", "title": "Overview", "Khare": true, "Roy": false}
    """

    model_config = ConfigDict(extra="allow")

    id: str
    title: str


class ChapterResponse(BaseModel):
    """A chapter and its ordered subtopics."""

    chapter: str
    subtopics: list[SubtopicResponse]


class BookResponse(BaseModel):
    """The full book."""

    users: list[str]
    book: list[ChapterResponse]


# =============================================================================
# UPDATE SCHEMAS
# =============================================================================


class ProgressUpdateRequest(BaseModel):
    """Request body for POST /progress/update.

    Fields are typed loosely here; ProgressService.update validates them so
    that a string "true" is rejected rather than coerced.
    """

    model_config = ConfigDict(populate_by_name=True)

    user: Any = None
    subtopic_id: Any = Field(default=None, alias="subtopicId")
    status: Any = None


# =============================================================================
# SUMMARY SCHEMAS
# =============================================================================


class ChapterProgressResponse(BaseModel):
    """One user's progress through one chapter."""

    chapter: str
    completed: int
    total: int
    percentage: int


class UserProgressResponse(BaseModel):
    """One user's progress through the book."""

    user: str
    completed: int
    total: int
    percentage: int
    chapters: list[ChapterProgressResponse]


class ProgressSummaryResponse(BaseModel):
    """Progress of every tracked user."""

    users: list[UserProgressResponse]


# =============================================================================
# HEALTH / ERROR SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ErrorResponse(BaseModel):
    """Error body returned with 4xx/5xx responses."""

    error: str
