"""Lookup API router."""

import logging

from fastapi import APIRouter, Depends, Query
from posthog import Posthog

from config.settings import Settings, get_settings
from core.dependencies import get_posthog_client, get_upstream_client
from core.exceptions import LookupServiceError, MissingParameterError
from core.sentry import capture_exception
from core.telemetry import RequestTelemetry
from lookup.models import LookupRequest, LookupResponse
from lookup.orchestrator import perform_lookup
from recommendations.models import Mood
from upstream.client import UpstreamClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lookup"])

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


@router.get(
    "/lookup",
    response_model=LookupResponse,
    summary="Look up a city's time, weather, air, news, food and a song for your mood",
    description="""
    Geocodes the city, then fetches in parallel:
    1. Current time zone
    2. Current weather
    3. Current air quality
    4. Local news headlines
    5. Nearby restaurants

    Any of the parallel fetches may fail without failing the request; its
    field is then null (or an empty list). A song is picked for the optional
    mood, preferring songs from the city's country.
    """,
    responses={
        200: {"description": "Lookup completed (possibly degraded)"},
        400: {"description": "City is missing"},
        404: {"description": "City not found"},
        502: {"description": "Required upstream unavailable"},
        500: {"description": "Internal server error"},
    },
)
async def handle_lookup(
    city: str | None = Query(None, description="City name, free text"),
    mood: str | None = Query(None, description="happy, sad or angry"),
    client: UpstreamClient = Depends(get_upstream_client),
    settings: Settings = Depends(get_settings),
    posthog_client: Posthog | None = Depends(get_posthog_client),
):
    """Process a lookup request."""
    if not city or not city.strip():
        raise MissingParameterError("City is required.")

    request = LookupRequest(city=city.strip(), mood=Mood.parse(mood))
    telemetry = RequestTelemetry()

    try:
        response = await perform_lookup(
            request=request,
            client=client,
            settings=settings,
            telemetry=telemetry,
        )
    except LookupServiceError:
        raise
    except Exception as e:
        logger.error(f"Lookup failed for '{request.city}': {type(e).__name__}: {e}")
        capture_exception(e, context={"city": request.city, "mood": request.mood})
        raise LookupServiceError(GENERIC_ERROR_MESSAGE) from e

    if posthog_client:
        telemetry.send_to_posthog(
            posthog_client,
            {
                "mood": request.mood,
                "lang": response.lang,
                "had_song": response.song is not None,
                "news_count": len(response.news),
                "restaurants_count": len(response.restaurants),
            },
        )

    return response
