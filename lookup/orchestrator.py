"""Lookup orchestrator: geocode -> fan out -> resolve mood/locale -> merge.

Only the geocode step can end a lookup early. Everything fetched afterwards is
optional and degrades to null/empty fields in the merged response.
"""

import logging
import random

from config.settings import Settings
from core.exceptions import CityNotFoundError, UpstreamUnavailableError
from core.telemetry import RequestTelemetry
from lookup.fanout import fan_out
from lookup.models import AuxResults, LookupRequest, LookupResponse
from recommendations.locales import resolve_locale
from recommendations.models import Locale, SongEntry
from recommendations.songs import pick_song
from upstream.client import UpstreamClient
from upstream.models import GeoResult

logger = logging.getLogger(__name__)


def merge_response(
    geo: GeoResult,
    locale: Locale,
    aux: AuxResults,
    song: SongEntry | None,
) -> LookupResponse:
    """Assemble the client response, defaulting unavailable lists to empty."""
    return LookupResponse(
        display_name=geo.display_name,
        lat=geo.lat,
        lon=geo.lon,
        lang=locale.lang,
        locale=locale.locale,
        time_zone=aux.time_zone,
        weather=aux.weather,
        air_quality=aux.air_quality,
        news=aux.news or [],
        restaurants=aux.restaurants or [],
        song=song,
    )


async def perform_lookup(
    request: LookupRequest,
    client: UpstreamClient,
    settings: Settings,
    telemetry: RequestTelemetry,
    rng: random.Random | None = None,
) -> LookupResponse:
    """Orchestrate the full lookup pipeline.

    Steps:
    1. Geocode the city (required)
    2. Resolve language/locale from the country code
    3. Fan out the optional fetches and wait for all of them to settle
    4. Pick a song for the mood
    5. Merge

    Raises:
        CityNotFoundError: The geocoder has no match
        UpstreamUnavailableError: The geocoder failed, or the time service failed
            while ``settings.require_time_zone`` is on
    """
    # Step 1: Geocode
    telemetry.record_api_call("geocoder")
    with telemetry.track_step("geocode"):
        geo = await client.geocode(request.city)

    if geo is None:
        raise CityNotFoundError(
            f'Could not find a city named "{request.city}".', details={"city": request.city}
        )

    telemetry.properties["country_code"] = geo.country_code

    # Step 2: Locale
    locale = resolve_locale(geo.country_code)

    # Step 3: Fan out
    aux = await fan_out(
        client,
        city=request.city,
        geo=geo,
        locale=locale,
        timeout=settings.upstream_timeout,
        telemetry=telemetry,
    )

    if settings.require_time_zone and aux.time_zone is None:
        raise UpstreamUnavailableError(
            "Could not fetch time data.", details={"lat": geo.lat, "lon": geo.lon}
        )

    # Step 4: Song
    song = pick_song(request.mood, geo.country_code, rng=rng)
    if request.mood and song:
        logger.info(
            f"Picked '{song.title}' by {song.artist} for {request.mood} in {geo.country_code}"
        )

    return merge_response(geo, locale, aux, song)
