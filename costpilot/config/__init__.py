"""Configuration package."""

from costpilot.config.settings import (
    AppSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    LocationSettings,
    Settings,
    SubsidySettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "LocationSettings",
    "Settings",
    "SubsidySettings",
    "get_settings",
    "validate_all_settings",
]
