"""Configuration package."""

from demobank.config.settings import (
    AppSettings,
    ClockSettings,
    LoggingSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ClockSettings",
    "LoggingSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
