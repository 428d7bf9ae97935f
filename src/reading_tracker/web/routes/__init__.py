"""Route handlers for Web API."""

from reading_tracker.web.routes.client import router as client_router
from reading_tracker.web.routes.health import router as health_router
from reading_tracker.web.routes.progress import router as progress_router

__all__ = [
    "client_router",
    "health_router",
    "progress_router",
]
