"""
Configuration Management for Prism Bills

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All host-level configuration is centralized here.
User-level preferences (notifications on/off, reminder days) live in the
bill document itself, not in the environment.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where and how the bill document is persisted."""

    model_config = SettingsConfigDict(
        env_prefix="PRISM_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the JSON document store"
    )
    store_key: str = Field(
        default="prism-bills-data",
        min_length=1,
        description="Key of the single bill document"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per document write before giving up"
    )

    @field_validator("store_key")
    @classmethod
    def validate_store_key(cls, v: str) -> str:
        """The key becomes a file name, so keep it to one path segment."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid store key: {v!r}")
        return v


class NotificationSettings(BaseSettings):
    """Notification scheduler configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PRISM_NOTIFICATIONS_",
        extra="ignore"
    )

    check_interval_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds between bill scans (hourly by default)"
    )
    default_reminder_days: str = Field(
        default="1,3,7",
        description="Comma-separated reminder offsets used for new documents"
    )

    @property
    def default_reminder_days_list(self) -> list[int]:
        """Get default reminder days as a list."""
        return sorted({
            int(day.strip())
            for day in self.default_reminder_days.split(",")
            if day.strip()
        })


class RecurrenceSettings(BaseSettings):
    """Bounds on recurring bill generation."""

    model_config = SettingsConfigDict(
        env_prefix="PRISM_RECURRENCE_",
        extra="ignore"
    )

    max_iterations: int = Field(
        default=12,
        ge=1,
        le=120,
        description="Maximum occurrences projected per bill per call"
    )
    horizon_months: int = Field(
        default=3,
        ge=1,
        le=24,
        description="How far ahead (calendar months) to generate bills"
    )


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
    currency_symbol: str = Field(
        default="$",
        description="Symbol used in notification text"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
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
    def notifications(self) -> NotificationSettings:
        return NotificationSettings()

    @property
    def recurrence(self) -> RecurrenceSettings:
        return RecurrenceSettings()

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

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for each section that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "notifications", "recurrence", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
