"""Request-scoped accessors for objects created by the app factory."""

from fastapi import Request

from reading_tracker.config.app_config import AppConfig
from reading_tracker.core.service import ProgressService


def get_service(request: Request) -> ProgressService:
    """Return the ProgressService attached to the running app."""
    return request.app.state.service


def get_config(request: Request) -> AppConfig:
    """Return the AppConfig the app was built with."""
    return request.app.state.config
