"""Health check router with real dependency checks."""

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings
from core.dependencies import get_songs, get_upstream_client
from core.exceptions import ServiceInitializationError
from upstream.client import UpstreamClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

CHECK_TIMEOUT = 3.0
CORE_SERVICES = {"songs"}


async def _check_songs() -> str:
    """Confirm the song catalog loads with at least one song."""
    try:
        catalog = get_songs()
    except ServiceInitializationError:
        return "error"
    return "ok" if len(catalog) > 0 else "error"


async def _check_geocoder(client: UpstreamClient) -> str:
    """Ping the geocoder through the shared upstream client."""
    return "ok" if await client.check_api() else "error"


async def _run_check(coro) -> str:
    """Run a single health check with a timeout."""
    try:
        return await asyncio.wait_for(coro, timeout=CHECK_TIMEOUT)
    except TimeoutError:
        return "timeout"


@router.get(
    "/health",
    summary="Health check",
    responses={
        200: {"description": "Service is healthy or degraded"},
        503: {"description": "Service is unhealthy (core dependency down)"},
    },
)
async def health_check(
    settings: Settings = Depends(get_settings),
    client: UpstreamClient = Depends(get_upstream_client),
):
    """Health check. The geocoder is probed but only degrades the status."""
    results = await asyncio.gather(
        _run_check(_check_songs()),
        _run_check(_check_geocoder(client)),
    )

    services = {
        "songs": results[0],
        "geocoder": results[1],
    }

    core_ok = all(services[s] == "ok" for s in CORE_SERVICES)
    all_ok = all(v == "ok" for v in services.values())

    if core_ok and all_ok:
        status = "healthy"
    elif core_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    if status != "healthy":
        logger.warning(f"Health check {status}: {services}")

    body = {
        "status": status,
        "version": settings.app_version,
        "services": services,
    }

    status_code = 200 if status in ("healthy", "degraded") else 503
    return JSONResponse(content=body, status_code=status_code)
