"""HTTP client for the public APIs behind a city lookup."""

import logging
from typing import Any

import httpx

from config.settings import Settings, get_settings
from core.exceptions import UpstreamUnavailableError
from core.sentry import add_upstream_breadcrumb
from services.feed import extract_feed_items
from upstream.models import GeoResult, NewsItem, Restaurant

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "us"

WEATHER_FIELDS = "temperature_2m,weather_code,wind_speed_10m,relative_humidity_2m"
AIR_QUALITY_FIELDS = "us_aqi,pm10,pm2_5"

OVERPASS_RESTAURANT_QUERY = """
[out:json][timeout:{timeout}];
(
  node["amenity"="restaurant"]["name"](around:{radius},{lat},{lon});
  way["amenity"="restaurant"]["name"](around:{radius},{lat},{lon});
);
out center {limit};
"""


def payload_field(payload: Any, key: str, expected: type) -> Any:
    """Read ``payload[key]`` from a JSON object body.

    Returns None when the field is absent; raises ValueError when the body is
    not an object or the field has the wrong type.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    value = payload.get(key)
    if value is not None and not isinstance(value, expected):
        raise ValueError(f"Unexpected {key!r} in payload: {type(value).__name__}")
    return value


def parse_geocoder_match(match: dict[str, Any]) -> GeoResult:
    """Reshape a Nominatim search result into a GeoResult."""
    address = match.get("address") or {}
    country_code = (address.get("country_code") or DEFAULT_COUNTRY_CODE).lower()
    return GeoResult(
        lat=float(match["lat"]),
        lon=float(match["lon"]),
        display_name=match.get("display_name") or "",
        country_code=country_code,
    )


def parse_overpass_element(element: dict[str, Any]) -> Restaurant | None:
    """Reshape an Overpass node/way into a Restaurant, or None if it lacks a name or position."""
    tags = element.get("tags") or {}
    name = tags.get("name")
    if not name:
        return None

    # Ways carry their position in "center" when queried with "out center"
    position = element if "lat" in element else element.get("center") or {}
    if "lat" not in position or "lon" not in position:
        return None

    return Restaurant(
        name=name,
        cuisine=tags.get("cuisine"),
        lat=position["lat"],
        lon=position["lon"],
    )


class UpstreamClient:
    """Client for every third-party service a lookup touches.

    Holds one pooled ``httpx.AsyncClient`` with the descriptive User-Agent that
    Nominatim and Overpass require. Each fetch makes exactly one attempt and
    raises on transport errors and non-success statuses; deciding which
    failures are fatal is left to the caller.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize the client.

        Args:
            settings: Application settings; defaults to the cached global settings
        """
        self.settings = settings or get_settings()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.settings.user_agent},
                timeout=self.settings.geocoder_timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def check_api(self) -> bool:
        """Check geocoder connectivity via the Nominatim status endpoint."""
        try:
            client = await self._get_client()
            resp = await client.get(
                f"{self.settings.geocoder_url}/status", params={"format": "json"}
            )
            return bool(resp.status_code == 200)
        except Exception:
            return False

    async def _get(self, service: str, url: str, **kwargs) -> httpx.Response:
        """GET ``url`` and raise for non-success statuses."""
        add_upstream_breadcrumb(service, {"url": url})
        client = await self._get_client()
        response = await client.get(url, **kwargs)
        response.raise_for_status()
        return response

    async def geocode(self, city: str) -> GeoResult | None:
        """Resolve a free-text city name to its best match.

        Args:
            city: City name as typed by the user

        Returns:
            GeoResult for the first match, or None when there are no matches

        Raises:
            UpstreamUnavailableError: On transport errors, non-success statuses
                or an unreadable body
        """
        try:
            response = await self._get(
                "geocoder",
                f"{self.settings.geocoder_url}/search",
                params={"q": city, "format": "json", "limit": 1, "addressdetails": 1},
            )
            matches = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Geocoding failed for '{city}': {type(e).__name__}: {e}")
            raise UpstreamUnavailableError(
                "Could not reach the geocoding service.", details={"city": city}
            ) from e

        if not matches:
            logger.info(f"No geocoder match for '{city}'")
            return None

        try:
            result = parse_geocoder_match(matches[0])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailableError(
                "Could not reach the geocoding service.", details={"city": city}
            ) from e

        logger.info(f"Geocoded '{city}' to {result.display_name} ({result.country_code})")
        return result

    async def fetch_time_zone(self, lat: float, lon: float) -> str | None:
        """Get the IANA time zone name at a coordinate."""
        response = await self._get(
            "time",
            f"{self.settings.time_api_url}/api/time/current/coordinate",
            params={"latitude": lat, "longitude": lon},
        )
        return payload_field(response.json(), "timeZone", str)

    async def fetch_weather(self, lat: float, lon: float) -> dict[str, Any] | None:
        """Get current conditions (fahrenheit, mph) at a coordinate."""
        response = await self._get(
            "weather",
            f"{self.settings.weather_api_url}/v1/forecast",
            params={
                "latitude": lat,
                "longitude": lon,
                "current": WEATHER_FIELDS,
                "temperature_unit": "fahrenheit",
                "wind_speed_unit": "mph",
            },
        )
        return payload_field(response.json(), "current", dict)

    async def fetch_air_quality(self, lat: float, lon: float) -> dict[str, Any] | None:
        """Get current US AQI and particulate readings at a coordinate."""
        response = await self._get(
            "air_quality",
            f"{self.settings.air_quality_api_url}/v1/air-quality",
            params={"latitude": lat, "longitude": lon, "current": AIR_QUALITY_FIELDS},
        )
        return payload_field(response.json(), "current", dict)

    async def fetch_news(
        self, city: str, lang: str = "en", country_code: str = DEFAULT_COUNTRY_CODE
    ) -> list[NewsItem]:
        """Search localized headlines mentioning the city."""
        region = country_code.upper()
        response = await self._get(
            "news",
            self.settings.news_feed_url,
            params={"q": city, "hl": lang, "gl": region, "ceid": f"{region}:{lang}"},
        )
        return extract_feed_items(response.text, limit=self.settings.news_limit)

    async def fetch_restaurants(self, lat: float, lon: float) -> list[Restaurant]:
        """Find named restaurants within the configured radius of a coordinate."""
        query = OVERPASS_RESTAURANT_QUERY.format(
            timeout=int(self.settings.upstream_timeout),
            radius=self.settings.restaurant_radius_m,
            lat=lat,
            lon=lon,
            limit=self.settings.restaurant_limit,
        )
        response = await self._get(
            "restaurants", self.settings.overpass_url, params={"data": query}
        )

        restaurants = []
        for element in payload_field(response.json(), "elements", list) or []:
            restaurant = parse_overpass_element(element)
            if restaurant is not None:
                restaurants.append(restaurant)
        return restaurants[: self.settings.restaurant_limit]
