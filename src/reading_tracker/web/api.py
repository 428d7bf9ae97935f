"""FastAPI application factory.

Main entry point for the Reading Tracker Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from reading_tracker.config.app_config import AppConfig, load_app_config
from reading_tracker.core.factory import create_store
from reading_tracker.core.service import ProgressService
from reading_tracker.core.store import ProgressStore
from reading_tracker.web.routes import client_router, health_router, progress_router
from reading_tracker.web.routes.client import STATIC_DIR

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup: schema and seed must be in place before serving traffic
    config: AppConfig = app.state.config
    app.state.store.initialize()
    logger.info(
        "api_startup",
        backend=config.backend,
        environment=config.server.environment,
        users=config.users,
    )
    yield
    # Shutdown (connections are per-operation, nothing to close)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": message}."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422."""
    logger.info("request.invalid_body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid input parameters"},
    )


def create_app(
    config: AppConfig | None = None,
    store: ProgressStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Configuration. Defaults to load_app_config()
        store: Progress store. Defaults to the backend named in config

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    store = store or create_store(config)

    app = FastAPI(
        title="Reading Tracker API",
        description="Per-user reading progress for a single book outline",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.service = ProgressService(store)

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(progress_router)
    app.include_router(client_router)

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


# Default app instance for uvicorn
app = create_app()
