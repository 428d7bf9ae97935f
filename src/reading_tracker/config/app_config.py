"""Application configuration loader.

Loads configuration from data/config/app_config_v1.yaml (optional) and then
applies environment overrides:

    PORT, HOST, APP_ENV, PROGRESS_BACKEND, PROGRESS_FILE,
    DATABASE_URL, DB_SSL_VERIFY, SEED_FILE, TRACKER_USERS

Usage:
    from reading_tracker.config.app_config import load_app_config

    config = load_app_config()
    print(config.backend, config.server.port)
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml

from reading_tracker.core.models import RESERVED_KEYS

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

BACKENDS = ("json", "sqlite")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when a configuration value is invalid."""


@dataclass
class ServerConfig:
    """HTTP listener settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"


@dataclass
class DatabaseConfig:
    """Relational backend settings."""

    url: str = "sqlite:///db/progress.db"
    # SQLite is file-local; the flag is carried for networked databases
    ssl_verify: bool = True


@dataclass
class AppConfig:
    """Application-wide configuration."""

    backend: str = "json"
    progress_file: str = "data/progress.json"
    seed_file: str | None = "data/seed/book.json"
    users: list[str] = field(default_factory=lambda: ["Khare", "Roy"])
    server: ServerConfig = field(default_factory=ServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "backend": None,
        "progress_file": "data/progress.json",
        "seed_file": "data/seed/book.json",
        "users": ["Khare", "Roy"],
        "server": {
            "host": "0.0.0.0",
            "port": 3000,
            "environment": "development",
        },
        "database": {
            "url": None,
            "ssl_verify": True,
        },
    }


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def parse_bool(value: Any, name: str) -> bool:
    """Parse a truthy/falsey config value.

    Raises:
        ConfigError: If the value is not recognizable as a boolean
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay process environment variables on file/default values."""
    result = copy.deepcopy(data)

    if "PORT" in environ:
        result["server"]["port"] = environ["PORT"]
    if "HOST" in environ:
        result["server"]["host"] = environ["HOST"]
    if "APP_ENV" in environ:
        result["server"]["environment"] = environ["APP_ENV"]
    if "PROGRESS_BACKEND" in environ:
        result["backend"] = environ["PROGRESS_BACKEND"]
    if "PROGRESS_FILE" in environ:
        result["progress_file"] = environ["PROGRESS_FILE"]
    if "DATABASE_URL" in environ:
        result["database"]["url"] = environ["DATABASE_URL"]
    if "DB_SSL_VERIFY" in environ:
        result["database"]["ssl_verify"] = environ["DB_SSL_VERIFY"]
    if "SEED_FILE" in environ:
        result["seed_file"] = environ["SEED_FILE"] or None
    if "TRACKER_USERS" in environ:
        result["users"] = [
            u.strip() for u in environ["TRACKER_USERS"].split(",") if u.strip()
        ]

    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Raises:
        ConfigError: If any value is invalid
    """
    server_data = data.get("server", {})
    try:
        port = int(server_data.get("port", 3000))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"PORT must be an integer, got {server_data.get('port')!r}") from e
    if not 0 < port < 65536:
        raise ConfigError(f"PORT out of range: {port}")

    server = ServerConfig(
        host=str(server_data.get("host", "0.0.0.0")),
        port=port,
        environment=str(server_data.get("environment", "development")),
    )

    db_data = data.get("database", {})
    db_url = db_data.get("url")
    database = DatabaseConfig(
        url=db_url or DatabaseConfig.url,
        ssl_verify=parse_bool(db_data.get("ssl_verify", True), "DB_SSL_VERIFY"),
    )

    # An explicit database URL selects the relational backend by default
    backend = data.get("backend") or ("sqlite" if db_url else "json")
    if backend not in BACKENDS:
        raise ConfigError(f"Unknown backend {backend!r}, expected one of {BACKENDS}")

    if backend == "sqlite" and "://" in database.url:
        scheme = database.url.split("://", 1)[0]
        if scheme != "sqlite":
            raise ConfigError(f"Unsupported database scheme: {scheme}")

    users = [str(u) for u in data.get("users") or []]
    if not users:
        raise ConfigError("At least one tracked user is required")
    reserved = RESERVED_KEYS.intersection(users)
    if reserved:
        raise ConfigError(f"Reserved names cannot be users: {sorted(reserved)}")

    return AppConfig(
        backend=backend,
        progress_file=str(data.get("progress_file", "data/progress.json")),
        seed_file=data.get("seed_file"),
        users=users,
        server=server,
        database=database,
    )


def load_app_config(
    force_reload: bool = False,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load application config: defaults, then YAML file, then environment.

    Args:
        force_reload: If True, ignore cached config and reload.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        AppConfig object with all settings.

    Raises:
        ConfigError: If a value is invalid
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data = _get_defaults()

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        file_data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
        data = _merge(data, file_data)
    else:
        logger.info("using_default_config")

    data = _apply_env_overrides(data, os.environ if environ is None else environ)

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when the environment changes at runtime.
    """
    global _cached_config
    _cached_config = None
