"""Integration test fixtures.

Runs the real app, UpstreamClient and song/locale tables end to end. Only the
network is replaced: an httpx.MockTransport answers for every upstream host
with representative payloads, and individual hosts can be made to fail.
"""

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from tests.factories import AIR_QUALITY_CURRENT, WEATHER_CURRENT, rss_feed, rss_item
from upstream.client import UpstreamClient

GEOCODER_MATCHES = {
    "paris": {
        "lat": "48.8588897",
        "lon": "2.3200410",
        "display_name": "Paris, Île-de-France, France métropolitaine, France",
        "address": {"city": "Paris", "country_code": "fr"},
    },
    "tokyo": {
        "lat": "35.6768601",
        "lon": "139.7638947",
        "display_name": "Tokyo, Japan",
        "address": {"city": "Tokyo", "country_code": "jp"},
    },
    "reykjavik": {
        "lat": "64.145981",
        "lon": "-21.9422367",
        "display_name": "Reykjavík, Iceland",
        "address": {"city": "Reykjavík", "country_code": "is"},
    },
    "bir tawil": {
        "lat": "21.8833",
        "lon": "33.7000",
        "display_name": "Bir Tawil",
    },
}

OVERPASS_ELEMENTS = [
    {
        "type": "node",
        "lat": 48.853,
        "lon": 2.339,
        "tags": {"name": "Le Procope", "cuisine": "french"},
    },
    {"type": "way", "center": {"lat": 48.87, "lon": 2.35}, "tags": {"name": "Bouillon Chartier"}},
    {"type": "node", "lat": 48.86, "lon": 2.34, "tags": {"amenity": "restaurant"}},
]


class FakeUpstreams:
    """Routes requests by host.

    Hosts in ``failing`` answer 500; hosts in ``bodies`` answer 200 with that JSON.
    """

    def __init__(self):
        self.failing: set[str] = set()
        self.bodies: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host in self.failing:
            return httpx.Response(500, text="upstream error")
        if host in self.bodies:
            return httpx.Response(200, json=self.bodies[host])

        if host == "nominatim.openstreetmap.org" and request.url.path == "/status":
            return httpx.Response(200, json={"status": 0, "message": "OK"})
        if host == "nominatim.openstreetmap.org":
            match = GEOCODER_MATCHES.get(request.url.params["q"].lower())
            return httpx.Response(200, json=[match] if match else [])
        if host == "timeapi.io":
            return httpx.Response(200, json={"timeZone": "Europe/Paris", "hour": 14})
        if host == "api.open-meteo.com":
            return httpx.Response(200, json={"current": WEATHER_CURRENT})
        if host == "air-quality-api.open-meteo.com":
            return httpx.Response(200, json={"current": AIR_QUALITY_CURRENT})
        if host == "news.google.com":
            city = request.url.params["q"]
            items = [rss_item(title=f"{city} story {i}", source="Wire") for i in range(7)]
            return httpx.Response(200, text=rss_feed(*items))
        if host == "overpass-api.de":
            return httpx.Response(200, json={"elements": OVERPASS_ELEMENTS})

        return httpx.Response(404)


@pytest.fixture
def upstreams():
    return FakeUpstreams()


@pytest.fixture
def integration_settings():
    return Settings(
        sentry_dsn=None,
        posthog_api_key=None,
        enable_telemetry=False,
        upstream_timeout=2.0,
    )


@pytest_asyncio.fixture
async def upstream_client(upstreams, integration_settings):
    client = UpstreamClient(integration_settings)
    client._client = httpx.AsyncClient(
        transport=httpx.MockTransport(upstreams.handler),
        headers={"User-Agent": integration_settings.user_agent},
    )
    yield client
    await client.close()


@pytest_asyncio.fixture
async def app_client(upstream_client, integration_settings):
    from config.settings import get_settings
    from core.dependencies import get_posthog_client, get_upstream_client
    from main import app

    app.dependency_overrides[get_upstream_client] = lambda: upstream_client
    app.dependency_overrides[get_posthog_client] = lambda: None
    app.dependency_overrides[get_settings] = lambda: integration_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
