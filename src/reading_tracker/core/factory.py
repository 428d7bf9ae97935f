"""Pick the progress store backend from configuration."""

from __future__ import annotations

from pathlib import Path

import structlog

from reading_tracker.config.app_config import AppConfig
from reading_tracker.core.json_store import JsonProgressStore
from reading_tracker.core.store import ProgressStore
from reading_tracker.db.database import parse_database_url
from reading_tracker.db.progress_repository import SqliteProgressStore

logger = structlog.get_logger(__name__)


def create_store(config: AppConfig) -> ProgressStore:
    """Build the store named by ``config.backend``."""
    seed_path = Path(config.seed_file) if config.seed_file else None

    if config.backend == "sqlite":
        db_path = parse_database_url(config.database.url)
        logger.info(
            "store.selected",
            backend="sqlite",
            path=str(db_path),
            ssl_verify=config.database.ssl_verify,
        )
        return SqliteProgressStore(db_path=db_path, seed_path=seed_path, users=config.users)

    logger.info("store.selected", backend="json", path=config.progress_file)
    return JsonProgressStore(
        path=Path(config.progress_file),
        seed_path=seed_path,
        users=config.users,
    )
