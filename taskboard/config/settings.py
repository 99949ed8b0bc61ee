"""Application settings using Pydantic."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DATABASE_",
        extra="ignore",
    )

    # Any SQLAlchemy async URL
    url: str = Field(default="sqlite+aiosqlite:///./taskboard.db")
    echo: bool = Field(default=False)


class CacheSettings(BaseSettings):
    """Aggregate cache configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CACHE_",
        extra="ignore",
    )

    aggregate_ttl_seconds: int = Field(default=900, ge=0)


class QuerySettings(BaseSettings):
    """Pagination defaults and limits."""

    model_config = SettingsConfigDict(env_prefix="QUERY_", extra="ignore")

    default_per_page: int = Field(default=10, ge=1)
    max_per_page: int = Field(default=100, ge=1)


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")

    # Nested settings - manually create to avoid env prefix issues
    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def cache(self) -> CacheSettings:
        return CacheSettings()

    @property
    def query(self) -> QuerySettings:
        return QuerySettings()


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
