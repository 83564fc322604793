"""Shared test fixtures for pytest."""

from unittest.mock import AsyncMock

import pytest

from tests.factories import (
    AIR_QUALITY_CURRENT,
    WEATHER_CURRENT,
    make_geo_result,
    make_news_item,
    make_restaurant,
)


@pytest.fixture
def paris_geo():
    """Geocoder result for Paris."""
    return make_geo_result()


@pytest.fixture
def mock_upstream_client(paris_geo):
    """Create a mock upstream client where every call succeeds for Paris."""
    client = AsyncMock()
    client.geocode = AsyncMock(return_value=paris_geo)
    client.fetch_time_zone = AsyncMock(return_value="Europe/Paris")
    client.fetch_weather = AsyncMock(return_value=dict(WEATHER_CURRENT))
    client.fetch_air_quality = AsyncMock(return_value=dict(AIR_QUALITY_CURRENT))
    client.fetch_news = AsyncMock(
        return_value=[make_news_item("Paris headline one"), make_news_item("Paris headline two")]
    )
    client.fetch_restaurants = AsyncMock(
        return_value=[make_restaurant("Le Procope"), make_restaurant("Bouillon", cuisine=None)]
    )
    client.check_api = AsyncMock(return_value=True)
    client.close = AsyncMock()
    return client
