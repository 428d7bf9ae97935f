"""Configuration package for the reading tracker."""

from reading_tracker.config.app_config import (
    AppConfig,
    ConfigError,
    DatabaseConfig,
    ServerConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "DatabaseConfig",
    "ServerConfig",
    "clear_config_cache",
    "load_app_config",
]
