"""
Configuration management for the Jobboard ATS.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
LOGS_DIR = ROOT_DIR / "logs"


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    # A full URI wins over the individual host/port/credential fields
    uri: str | None = None
    host: str = "localhost"
    port: int = 27017
    name: str = "jobboard"
    username: str | None = None
    password: str | None = None

    # Every storage round-trip is bounded by these
    server_selection_timeout_ms: int = Field(default=5000, gt=0)
    connect_timeout_ms: int = Field(default=5000, gt=0)
    operation_timeout_ms: int = Field(default=10000, gt=0)
    max_pool_size: int = Field(default=50, gt=0)
    min_pool_size: int = Field(default=0, ge=0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = LOGS_DIR / "jobboard_ats.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class NotificationSettings(BaseSettings):
    """Outbound notification configuration."""

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")

    enabled: bool = True
    from_address: str = "notifications@jobboard.local"
    base_url: str = "http://localhost:3000"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Job links are built as f"{base_url}/jobs/{id}"."""
        return v.rstrip("/")


class SchedulerSettings(BaseSettings):
    """Settings for the periodic job-alert trigger."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    cron_secret: str | None = None
    daily_window_hours: int = Field(default=24, gt=0)
    weekly_window_days: int = Field(default=7, gt=0)


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "Jobboard ATS"
    version: str = "0.1.0"
    description: str = "Applicant tracking core for a job-board platform"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
