"""Configuration for the presenter dispatch adapter."""

from .settings import (
    ConfigurationError,
    DispatchSettings,
    LoggingSettings,
    Settings,
    get_settings,
)


__all__ = [
    "ConfigurationError",
    "DispatchSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
