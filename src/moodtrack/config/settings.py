"""Configuration management for moodtrack using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GarminSettings(BaseSettings):
    """Garmin Connect credentials for the health data provider."""

    model_config = SettingsConfigDict(env_prefix="GARMIN_", env_file=".env", extra="ignore")

    email: str = ""
    password: SecretStr = SecretStr("")

    @property
    def is_configured(self) -> bool:
        return bool(self.email and self.password.get_secret_value())


class DatabaseSettings(BaseSettings):
    """Database settings."""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    database_url: str = Field(
        default="sqlite:///~/.local/share/moodtrack/moodtrack.db", alias="DATABASE_URL"
    )


class PathSettings(BaseSettings):
    """Locations of the small files kept next to the database."""

    model_config = SettingsConfigDict(env_prefix="MOODTRACK_", env_file=".env", extra="ignore")

    data_dir: Path = Path("~/.local/share/moodtrack")

    @property
    def session_file(self) -> Path:
        return self.data_dir.expanduser() / "session.json"

    @property
    def widget_file(self) -> Path:
        return self.data_dir.expanduser() / "widget.json"


class AggregationSettings(BaseSettings):
    """Window sizes for statistics."""

    model_config = SettingsConfigDict(env_prefix="MOODTRACK_", env_file=".env", extra="ignore")

    mood_trend_days: int = 7
    distribution_days: int = 30
    context_days: int = 14
    recent_limit: int = 30


class ReminderSettings(BaseSettings):
    """Default daily reminder time for new installations."""

    model_config = SettingsConfigDict(env_prefix="REMINDER_", env_file=".env", extra="ignore")

    hour: int = Field(default=20, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class Settings(BaseSettings):
    """Main moodtrack settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # General
    environment: Literal["development", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    language: str = Field(default="de", alias="MOODTRACK_LANGUAGE")

    # Sub-settings
    garmin: GarminSettings = Field(default_factory=GarminSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)
    reminder: ReminderSettings = Field(default_factory=ReminderSettings)


def get_settings() -> Settings:
    """Load settings from the environment and .env file."""
    return Settings()
