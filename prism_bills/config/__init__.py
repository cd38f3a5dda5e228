"""Configuration package."""

from prism_bills.config.settings import (
    AppSettings,
    NotificationSettings,
    RecurrenceSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "NotificationSettings",
    "RecurrenceSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
