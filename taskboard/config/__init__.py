"""Configuration module."""

from .settings import (
    AppSettings,
    DatabaseSettings,
    CacheSettings,
    QuerySettings,
    get_settings,
    clear_settings_cache,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "CacheSettings",
    "QuerySettings",
    "get_settings",
    "clear_settings_cache",
]
