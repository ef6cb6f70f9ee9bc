"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables (or a ``.env`` file)
following 12-factor principles.
"""

import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Geocoding: general
    geocoder_fallback_order: str = Field(
        default="census,google,nominatim,photon",
        description="Comma-separated backend order; the first backend with a usable result wins",
    )
    geocoder_user_agent: str = Field(
        default="geocoder-list/1.0",
        description="User-Agent header sent by every backend",
    )
    geocoder_timeout: float = Field(
        default=10.0,
        description="Per-request timeout in seconds, shared by all backends",
        gt=0,
    )
    geocoder_proxy: str | None = Field(
        default=None,
        description="Explicit HTTP(S) proxy URL for all backends",
    )
    geocoder_trust_env: bool = Field(
        default=True,
        description="Honour proxy settings from the environment (HTTPS_PROXY etc.)",
    )

    # Geocoding: US Census
    geocoder_census_enabled: bool = Field(
        default=True,
        description="Enable US Census Bureau geocoder",
    )
    geocoder_census_pattern: str = Field(
        default=r"(USA|United States)$",
        description="Regex a query must match before the Census geocoder is tried (empty for all queries)",
    )

    @field_validator("geocoder_census_pattern")
    @classmethod
    def validate_census_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            msg = f"Invalid geocoder_census_pattern: {e}"
            raise ValueError(msg) from e
        return v

    # Geocoding: Google Maps
    geocoder_google_enabled: bool = Field(
        default=False,
        description="Enable Google Maps geocoder (requires API key)",
    )
    geocoder_google_api_key: str | None = Field(
        default=None,
        description="Google Maps Geocoding API key",
    )

    # Geocoding: Nominatim (OpenStreetMap)
    geocoder_nominatim_enabled: bool = Field(
        default=True,
        description="Enable Nominatim (OpenStreetMap) geocoder",
    )
    geocoder_nominatim_email: str = Field(
        default="",
        description="Email for Nominatim usage policy compliance",
    )

    # Geocoding: Photon (Komoot)
    geocoder_photon_enabled: bool = Field(
        default=True,
        description="Enable Photon (Komoot) geocoder",
    )
    geocoder_photon_base_url: str = Field(
        default="https://photon.komoot.io",
        description="Photon geocoder base URL (self-hostable)",
    )

    @property
    def geocoder_fallback_order_list(self) -> list[str]:
        """Parse fallback order string into a list of backend names.

        Returns:
            List of backend names in fallback order.
        """
        if not self.geocoder_fallback_order.strip():
            return []
        return [p.strip().lower() for p in self.geocoder_fallback_order.split(",") if p.strip()]

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Write stderr log records as JSON lines",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )


@lru_cache
def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
