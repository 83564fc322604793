"""Models for the lookup API contract."""

from typing import Any

from pydantic import BaseModel

from recommendations.models import Mood, SongEntry
from upstream.models import CamelModel, NewsItem, Restaurant


class LookupRequest(BaseModel):
    """Query parameters of GET /api/lookup, after validation."""

    city: str
    mood: Mood | None = None


class AuxResults(BaseModel):
    """Settled fan-out results. ``None`` marks a call that failed, timed out or returned an error."""

    time_zone: str | None = None
    weather: dict[str, Any] | None = None
    air_quality: dict[str, Any] | None = None
    news: list[NewsItem] | None = None
    restaurants: list[Restaurant] | None = None

    def unavailable(self) -> list[str]:
        """Names of the slots that came back unavailable."""
        return [name for name, value in self if value is None]


class LookupResponse(CamelModel):
    """Merged response for the client page. Every field is always present."""

    display_name: str
    lat: float
    lon: float
    lang: str
    locale: str
    time_zone: str | None = None
    weather: dict[str, Any] | None = None
    air_quality: dict[str, Any] | None = None
    news: list[NewsItem] = []
    restaurants: list[Restaurant] = []
    song: SongEntry | None = None
