"""Progress endpoints: fetch the book, update one flag, summarize."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from reading_tracker.core.errors import (
    InvalidInputError,
    StoreError,
    SubtopicNotFoundError,
)
from reading_tracker.core.service import ProgressService
from reading_tracker.web.dependencies import get_service
from reading_tracker.web.schemas import (
    BookResponse,
    ChapterResponse,
    ErrorResponse,
    ProgressSummaryResponse,
    ProgressUpdateRequest,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get(
    "",
    response_model=BookResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_progress(service: ProgressService = Depends(get_service)) -> dict[str, Any]:
    """Return the full book with every user's completion flags."""
    try:
        book = service.get_tree()
    except StoreError as e:
        logger.error("progress.get_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read progress data",
        )

    return book.to_dict()


@router.post(
    "/update",
    response_model=ChapterResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def update_progress(
    payload: ProgressUpdateRequest,
    service: ProgressService = Depends(get_service),
) -> dict[str, Any]:
    """Set one user's flag on one subtopic and return its chapter."""
    try:
        chapter = service.update(payload.user, payload.subtopic_id, payload.status)
    except InvalidInputError as e:
        logger.info("progress.update_rejected", field=e.field, reason=e.reason)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid input parameters",
        )
    except SubtopicNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subtopic not found",
        )
    except StoreError as e:
        logger.error("progress.update_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update progress",
        )

    return chapter.to_dict()


@router.get(
    "/summary",
    response_model=ProgressSummaryResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_summary(service: ProgressService = Depends(get_service)) -> dict[str, Any]:
    """Return overall and per-chapter percentages for each user."""
    try:
        summaries = service.summary()
    except StoreError as e:
        logger.error("progress.summary_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read progress data",
        )

    return {"users": [s.to_dict() for s in summaries]}
