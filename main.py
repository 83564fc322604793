"""Main application entry point for the City Mood Lookup service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config.settings import get_settings
from core.dependencies import close_upstream_client, flush_posthog, shutdown_posthog
from core.exceptions import LookupServiceError
from core.logging import setup_logging
from core.sentry import init_sentry
from lookup.router import GENERIC_ERROR_MESSAGE
from lookup.router import router as lookup_router
from recommendations.locales import get_locale_table
from recommendations.songs import get_song_catalog
from routers.health import router as health_router

load_dotenv()

settings = get_settings()

init_sentry(
    dsn=settings.sentry_dsn,
    environment="production" if settings.log_level != "DEBUG" else "development",
    release=settings.app_version,
)

log_file = None
if settings.log_level != "DEBUG":
    log_dir = Path("/app/logs") if Path("/app/logs").exists() else Path("logs")
    log_file = log_dir / "city-mood-lookup.log"
setup_logging(level=settings.log_level, log_file=log_file)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan with proper startup and shutdown."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(
        f"Fan-out timeout: {settings.upstream_timeout}s, "
        f"time zone {'required' if settings.require_time_zone else 'optional'}"
    )

    # Static tables load once at startup; /health reports a catalog that failed here
    try:
        get_song_catalog()
        get_locale_table()
    except Exception as e:
        logger.error(f"Failed to load lookup tables: {type(e).__name__}: {e}")

    yield

    logger.info("Shutting down application")
    shutdown_posthog()
    await close_upstream_client()
    logger.info("All services shut down")


app = FastAPI(
    title=settings.app_name,
    description="City time, weather, air quality, news, restaurants and a song for your mood",
    version=settings.app_version,
    lifespan=lifespan,
)


@app.exception_handler(LookupServiceError)
async def lookup_error_handler(request: Request, exc: LookupServiceError):
    """Render service errors as ``{"error": message}`` with the error's status."""
    if exc.status_code >= 500:
        logger.warning(f"{request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Render anything unexpected with the generic error body."""
    logger.error(f"Unhandled error on {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


@app.middleware("http")
async def posthog_flush_middleware(request: Request, call_next):
    """Flush PostHog events after each request to prevent data loss."""
    response = await call_next(request)
    flush_posthog()
    return response


app.include_router(health_router, prefix="", tags=["health"])
app.include_router(lookup_router, prefix="/api", tags=["lookup"])

# The front-end is optional; mount it last so API routes take precedence
if settings.static_dir.is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    logger.info(f"Serving static files from {settings.static_dir}")

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
