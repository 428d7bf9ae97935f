"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from reading_tracker.config.app_config import AppConfig
from reading_tracker.web.dependencies import get_config
from reading_tracker.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(config: AppConfig = Depends(get_config)) -> HealthResponse:
    """Liveness check. Does not touch the store."""
    return HealthResponse(
        status="ok",
        version="0.1.0",
        environment=config.server.environment,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
