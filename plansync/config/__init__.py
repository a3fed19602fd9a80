"""Configuration package."""

from plansync.config.settings import (
    LoggingSettings,
    Settings,
    StoreSettings,
    load_settings,
)

__all__ = [
    "LoggingSettings",
    "Settings",
    "StoreSettings",
    "load_settings",
]
