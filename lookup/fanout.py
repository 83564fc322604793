"""Concurrent, failure-isolated fetching of the optional lookup data.

Every auxiliary source is optional: a call that raises, returns an error status
or outlives its timeout settles as ``None`` without touching its siblings.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from core.sentry import add_upstream_breadcrumb
from core.telemetry import RequestTelemetry
from lookup.models import AuxResults
from recommendations.models import Locale
from upstream.client import UpstreamClient
from upstream.models import GeoResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def fetch_optional(
    name: str,
    call: Awaitable[T],
    timeout: float,
    telemetry: RequestTelemetry | None = None,
) -> T | None:
    """Await ``call`` with a timeout, turning any failure into None.

    Args:
        name: Service name used for logs, breadcrumbs and telemetry
        call: The upstream coroutine
        timeout: Seconds before the call is cancelled
        telemetry: Optional request telemetry to record the step on

    Returns:
        The call's result, or None if it failed or timed out
    """
    if telemetry:
        telemetry.record_api_call(name)

    start = time.perf_counter()
    error_type = None
    result = None
    try:
        result = await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError:
        error_type = "TimeoutError"
        logger.warning(f"{name} lookup timed out after {timeout}s")
    except Exception as e:
        error_type = type(e).__name__
        logger.warning(f"{name} lookup failed: {error_type}: {e}")

    if error_type:
        add_upstream_breadcrumb(name, {"error_type": error_type}, level="warning")

    if telemetry:
        telemetry.record_step(
            name, duration_ms=(time.perf_counter() - start) * 1000, error_type=error_type
        )
    return result


async def fan_out(
    client: UpstreamClient,
    city: str,
    geo: GeoResult,
    locale: Locale,
    timeout: float,
    telemetry: RequestTelemetry | None = None,
) -> AuxResults:
    """Fetch time zone, weather, air quality, news and restaurants concurrently.

    Waits for every call to settle; results arrive in no particular order and
    are only read once all of them are done.
    """
    time_zone, weather, air_quality, news, restaurants = await asyncio.gather(
        fetch_optional("time", client.fetch_time_zone(geo.lat, geo.lon), timeout, telemetry),
        fetch_optional("weather", client.fetch_weather(geo.lat, geo.lon), timeout, telemetry),
        fetch_optional(
            "air_quality", client.fetch_air_quality(geo.lat, geo.lon), timeout, telemetry
        ),
        fetch_optional(
            "news", client.fetch_news(city, locale.lang, geo.country_code), timeout, telemetry
        ),
        fetch_optional(
            "restaurants", client.fetch_restaurants(geo.lat, geo.lon), timeout, telemetry
        ),
    )

    results = AuxResults(
        time_zone=time_zone,
        weather=weather,
        air_quality=air_quality,
        news=news,
        restaurants=restaurants,
    )
    unavailable = results.unavailable()
    if unavailable:
        logger.info(f"Lookup for '{city}' degraded, unavailable: {', '.join(unavailable)}")
    return results
