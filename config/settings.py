"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=3000, description="Port to run the server on")
    log_level: str = Field(default="INFO", description="Logging level")
    static_dir: Path = Field(
        default=Path("public"), description="Front-end asset directory served at the site root"
    )

    # Upstream HTTP Configuration
    user_agent: str = Field(
        default="CityMoodLookup/1.0",
        description="Client identifier sent to upstream APIs (required by Nominatim policy)",
    )
    geocoder_timeout: float = Field(
        default=10.0, description="Timeout in seconds for the required geocoding call"
    )
    upstream_timeout: float = Field(
        default=8.0, description="Timeout in seconds for each optional fan-out call"
    )
    require_time_zone: bool = Field(
        default=False, description="Fail the lookup with 502 when the time service is down"
    )

    # Upstream Endpoints
    geocoder_url: str = Field(
        default="https://nominatim.openstreetmap.org", description="Nominatim base URL"
    )
    time_api_url: str = Field(default="https://timeapi.io", description="timeapi.io base URL")
    weather_api_url: str = Field(
        default="https://api.open-meteo.com", description="Open-Meteo forecast base URL"
    )
    air_quality_api_url: str = Field(
        default="https://air-quality-api.open-meteo.com",
        description="Open-Meteo air quality base URL",
    )
    news_feed_url: str = Field(
        default="https://news.google.com/rss/search", description="Google News RSS search URL"
    )
    overpass_url: str = Field(
        default="https://overpass-api.de/api/interpreter", description="Overpass API endpoint"
    )

    # Result Shaping
    news_limit: int = Field(default=5, description="Maximum news items extracted from the feed")
    restaurant_radius_m: int = Field(
        default=1500, description="Search radius in meters for nearby restaurants"
    )
    restaurant_limit: int = Field(default=10, description="Maximum restaurants returned")

    # Feature Flags
    enable_telemetry: bool = Field(default=True, description="Enable PostHog telemetry")

    # PostHog Configuration
    posthog_api_key: str | None = Field(None, description="PostHog API key for telemetry")
    posthog_host: str = Field(default="https://us.i.posthog.com", description="PostHog host URL")

    # Sentry Configuration
    sentry_dsn: str | None = Field(None, description="Sentry DSN for error tracking")

    # Application Metadata
    app_name: str = Field(default="City-Mood-Lookup", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
