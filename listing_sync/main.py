from contextlib import asynccontextmanager
import asyncio
from typing import Optional

from fastapi import FastAPI

from listing_sync.api.routes import health_router, stats_router, sync_router
from listing_sync.core.config import settings
from listing_sync.core.exceptions import ConfigurationError
from listing_sync.core.logging import get_logger
from listing_sync.services.run_history import run_and_record


log = get_logger("app")

# Background task handle
_sync_task: Optional[asyncio.Task] = None


async def run_sync_pipeline() -> None:
    """Run one scheduled sync; errors are logged, never raised."""
    log.info("Starting scheduled listing sync...")
    try:
        result = await run_and_record()
        log.info(f"Scheduled sync completed | success={result.success}")
    except ConfigurationError as exc:
        log.error(f"Scheduled sync skipped: {exc}")
    except Exception as exc:  # noqa: BLE001
        log.exception(f"Scheduled sync failed: {exc}")


async def scheduled_sync_task() -> None:
    """Background task that syncs at the configured interval."""
    interval = settings.SYNC_INTERVAL_SECONDS
    log.info(f"Scheduled sync task started (interval: {interval}s)")

    # Run immediately on startup
    await run_sync_pipeline()

    while True:
        try:
            await asyncio.sleep(interval)
            await run_sync_pipeline()
        except asyncio.CancelledError:
            log.info("Scheduled sync task cancelled")
            break


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _sync_task

    log.info(f"Starting listing sync service in {settings.ENV.upper()} mode")

    missing = settings.missing_sync_settings()
    if missing:
        log.warning(f"Sync is not configured, missing: {', '.join(missing)}")

    if settings.SYNC_SCHEDULE_ENABLED:
        log.info("Starting scheduled sync background task...")
        _sync_task = asyncio.create_task(scheduled_sync_task())
    else:
        log.info("Scheduled sync is disabled (SYNC_SCHEDULE_ENABLED=false)")

    yield

    if _sync_task:
        log.info("Cancelling scheduled sync task...")
        _sync_task.cancel()
        try:
            await _sync_task
        except asyncio.CancelledError:
            pass
        _sync_task = None

    log.info("Listing sync service shutdown complete")


app = FastAPI(
    title="Listing Sync",
    description="Keeps HubDB listing tables consistent with the AppFolio unit directory",
    version="1.0.0",
    lifespan=lifespan,
    # Disable docs in production for security
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    debug=settings.debug_enabled,
)


app.include_router(sync_router)
app.include_router(health_router)
app.include_router(stats_router)
