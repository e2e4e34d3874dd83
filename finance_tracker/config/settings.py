"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The storage layer never reads the environment on its own; it receives
a settings object (or the pieces of one) from whoever constructs it.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational database connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite:///finance_tracker.db",
        description="SQLAlchemy database URL"
    )

    # Pool behaviour. A personal tracker needs a single connection.
    pool_size: int = Field(
        default=1,
        ge=1,
        le=20,
        description="Maximum number of pooled connections"
    )
    pool_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long to wait for a connection before failing"
    )
    pool_recycle_seconds: int = Field(
        default=30,
        ge=-1,
        description="Recycle connections idle longer than this (-1 disables)"
    )
    statement_timeout_ms: int = Field(
        default=10_000,
        ge=0,
        description="Server-side statement timeout (PostgreSQL only, 0 disables)"
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # Connection verification retries
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made by Database.connect() before giving up"
    )
    connect_backoff_min_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Minimum wait between connection attempts"
    )
    connect_backoff_max_seconds: float = Field(
        default=10.0,
        ge=0,
        description="Maximum wait between connection attempts"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject blank URLs early instead of failing inside SQLAlchemy."""
        if not v.strip():
            raise ValueError("Database URL must not be empty")
        return v.strip()

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def is_in_memory(self) -> bool:
        """True for SQLite URLs without a file path (sqlite:// or :memory:)."""
        if not self.is_sqlite:
            return False
        path = self.url.split("://", 1)[-1].lstrip("/")
        return path in ("", ":memory:")


class StorageSettings(BaseSettings):
    """Which storage backend to construct."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["memory", "sql"] = Field(
        default="memory",
        description="memory (ephemeral) or sql (persistent)"
    )
    create_schema: bool = Field(
        default=True,
        description="Create missing tables when the sql backend starts"
    )


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False gives console output)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )


class Settings(BaseSettings):
    """
    Root settings object.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed to load.
    Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("database", "storage", "logging", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
