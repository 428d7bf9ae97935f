"""Shared fixtures: a small seed book and both store backends."""

import json
from pathlib import Path
from typing import Any

import pytest

from reading_tracker.config.app_config import clear_config_cache
from reading_tracker.core.json_store import JsonProgressStore
from reading_tracker.db.progress_repository import SqliteProgressStore


@pytest.fixture(autouse=True)
def _fresh_config():
    """Each test sees configuration loaded from its own environment."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def seed_data() -> dict[str, Any]:
    """Two chapters; Roy has already finished 2.1."""
    return {
        "users": ["Khare", "Roy"],
        "book": [
            {
                "chapter": "Intro",
                "subtopics": [
                    {"id": "1.1", "title": "Overview", "Khare": False, "Roy": False},
                    {"id": "1.2", "title": "Setup", "Khare": False, "Roy": False},
                ],
            },
            {
                "chapter": "Basics",
                "subtopics": [
                    {"id": "2.1", "title": "Variables", "Khare": False, "Roy": True},
                    {"id": "2.2", "title": "Loops", "Khare": False, "Roy": False},
                    {"id": "2.3", "title": "Functions", "Khare": False, "Roy": False},
                ],
            },
        ],
    }


@pytest.fixture
def seed_file(tmp_path, seed_data) -> Path:
    """Seed outline written to disk."""
    path = tmp_path / "seed" / "book.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(seed_data), encoding="utf-8")
    return path


@pytest.fixture
def json_store(tmp_path, seed_file) -> JsonProgressStore:
    """Initialized JSON store (seed copied into place)."""
    store = JsonProgressStore(path=tmp_path / "progress.json", seed_path=seed_file)
    store.initialize()
    return store


@pytest.fixture
def sqlite_store(tmp_path, seed_file) -> SqliteProgressStore:
    """Initialized SQLite store (schema created and seeded)."""
    store = SqliteProgressStore(db_path=tmp_path / "progress.db", seed_path=seed_file)
    store.initialize()
    return store


@pytest.fixture(params=["json", "sqlite"])
def store(request):
    """Each backend in turn, for tests of the shared contract."""
    return request.getfixturevalue(f"{request.param}_store")
