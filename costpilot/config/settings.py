"""
Configuration Management for CostPilot

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
External services (Gemini, Google Sheets, OpenStreetMap endpoints, the
subsidy CSV) are all optional: the engine runs without any of them.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (fallback explanations are used when missing)"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Model used for insights and planners"
    )
    strategy_model_name: str = Field(
        default="gemini-2.0-flash",
        description="Model used for the Wealth+ strategy"
    )
    max_tokens: int = Field(
        default=4096,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    profiles_sheet_name: str = Field(
        default="Profiles",
        description="Name of the sheet holding one profile per user"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class SubsidySettings(BaseSettings):
    """Subsidy catalog source."""

    model_config = SettingsConfigDict(
        env_prefix="SUBSIDY_",
        env_file=".env",
        extra="ignore"
    )

    catalog_csv_url: Optional[str] = Field(
        default=None,
        description="Published CSV of subsidy programs; built-in catalog when unset"
    )
    refresh_interval_seconds: int = Field(
        default=3600,
        ge=60,
        description="How often the CSV catalog is re-fetched"
    )


class LocationSettings(BaseSettings):
    """OpenStreetMap-backed location and routing endpoints."""

    model_config = SettingsConfigDict(
        env_prefix="LOCATION_",
        env_file=".env",
        extra="ignore"
    )

    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org/reverse",
        description="Reverse geocoding endpoint"
    )
    overpass_url: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass API endpoint for transit lookups"
    )
    osrm_url: str = Field(
        default="https://router.project-osrm.org/route/v1/driving",
        description="OSRM driving route endpoint"
    )
    # Nominatim usage policy requires an identifying User-Agent
    user_agent: str = Field(
        default="CostPilot/1.0",
    )
    cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
    )
    transit_radius_m: int = Field(
        default=3000,
        ge=100,
        le=20000,
    )
    use_osm_routing: bool = Field(
        default=False,
        description="Use OSRM for commute routes instead of the haversine estimate"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # HTTP server
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3001, ge=1, le=65535)
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    use_storage: bool = Field(
        default=True,
        description="Connect Google Sheets storage at startup"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def subsidies(self) -> SubsidySettings:
        return SubsidySettings()

    @property
    def location(self) -> LocationSettings:
        return LocationSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "gemini": lambda: settings.gemini,
        "google_sheets": lambda: settings.google_sheets,
        "subsidies": lambda: settings.subsidies,
        "location": lambda: settings.location,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    # A missing key is valid config, but worth surfacing
    if results.get("gemini"):
        results["gemini_ai_enabled"] = settings.gemini.is_configured

    return results
