"""FastAPI dependency injection providers."""

import logging

from fastapi import Depends
from posthog import Posthog

from config.settings import Settings, get_settings
from core.exceptions import ServiceInitializationError
from recommendations.songs import SongCatalog, get_song_catalog
from upstream.client import UpstreamClient

logger = logging.getLogger(__name__)

# Module-level instances for lifecycle management
_upstream_client: UpstreamClient | None = None
_posthog_client: Posthog | None = None


def get_upstream_client(settings: Settings = Depends(get_settings)) -> UpstreamClient:
    """Get the shared upstream API client.

    The underlying HTTP connection pool is created on first use and reused by
    every request until shutdown.

    Args:
        settings: Application settings

    Returns:
        UpstreamClient: Shared client instance
    """
    global _upstream_client

    if _upstream_client is None:
        _upstream_client = UpstreamClient(settings)
        logger.info(f"Upstream client initialized (User-Agent: {settings.user_agent})")

    return _upstream_client


async def close_upstream_client() -> None:
    """Close the upstream client and its HTTP connection pool."""
    global _upstream_client
    if _upstream_client:
        await _upstream_client.close()
        _upstream_client = None


def get_songs() -> SongCatalog:
    """Get the song catalog.

    Raises:
        ServiceInitializationError: If the catalog file is missing or invalid
    """
    try:
        return get_song_catalog()
    except Exception as e:
        logger.error(f"Failed to load song catalog: {e}")
        raise ServiceInitializationError(f"Song catalog failed to load: {e}") from e


def get_posthog_client(settings: Settings = Depends(get_settings)) -> Posthog | None:
    """Get PostHog client instance.

    Args:
        settings: Application settings

    Returns:
        Optional[Posthog]: PostHog client if configured and enabled, None otherwise
    """
    global _posthog_client

    if not settings.enable_telemetry:
        logger.debug("Telemetry disabled")
        return None

    if not settings.posthog_api_key:
        logger.debug("POSTHOG_API_KEY not set - telemetry disabled")
        return None

    if _posthog_client is None:
        _posthog_client = Posthog(
            project_api_key=settings.posthog_api_key,
            host=settings.posthog_host,
        )
        logger.info(f"PostHog client initialized (host: {settings.posthog_host})")

    return _posthog_client


def flush_posthog() -> None:
    """Flush any buffered PostHog events."""
    global _posthog_client
    if _posthog_client:
        _posthog_client.flush()


def shutdown_posthog() -> None:
    """Shutdown PostHog client gracefully."""
    global _posthog_client
    if _posthog_client:
        _posthog_client.shutdown()
        _posthog_client = None
        logger.info("PostHog client shutdown")
