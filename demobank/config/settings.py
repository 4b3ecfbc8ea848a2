"""
Configuration Management for Demo Bank

Settings come from DEMOBANK_* environment variables (or a .env file),
parsed by pydantic-settings, one class per section.

DESIGN DECISION: Only the factory reads configuration. Every component
takes its collaborators as arguments, so tests never depend on the
environment.
"""

from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where fixtures are read from and overrides are written to."""

    model_config = SettingsConfigDict(
        env_prefix="DEMOBANK_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    fixtures_dir: Optional[Path] = Field(
        default=None,
        description="Fixture root; None uses the fixtures bundled with the package"
    )
    overrides_dir: Path = Field(
        default=Path(".demobank/overrides"),
        description="Directory holding per-persona override snapshots"
    )

    @field_validator("fixtures_dir")
    @classmethod
    def validate_fixtures_dir(cls, v: Optional[Path]) -> Optional[Path]:
        """Warn if the fixture root doesn't exist (loading will fail open)."""
        if v is not None and not v.is_dir():
            import warnings
            warnings.warn(
                f"Fixture directory not found at {v}. "
                "Every persona will load empty collections."
            )
        return v


class ClockSettings(BaseSettings):
    """Anchor date and formatting."""

    model_config = SettingsConfigDict(
        env_prefix="DEMOBANK_CLOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    anchor: datetime = Field(
        default=datetime(2025, 11, 20, 12, 0, 0),
        description="The fixed 'now' all day offsets are relative to"
    )
    date_format: str = Field(
        default="MMM d, yyyy",
        description="Default absolute date pattern"
    )
    locale: str = Field(
        default="en",
        pattern="^(en|sv)$",
        description="Month and weekday names"
    )


class LoggingSettings(BaseSettings):
    """structlog configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DEMOBANK_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines; False renders for the console"
    )

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class AppSettings(BaseSettings):
    """App-wide settings: environment name and the starting persona."""

    model_config = SettingsConfigDict(
        env_prefix="DEMOBANK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    default_persona: str = Field(
        default="john",
        description="Persona used when none has been selected yet"
    )


class Settings(BaseSettings):
    """
    Every settings section behind one object.

    Sections are read from the environment each time they are accessed.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def clock(self) -> ClockSettings:
        return ClockSettings()

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

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "clock", "logging", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
