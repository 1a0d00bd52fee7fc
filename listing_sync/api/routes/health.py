"""Health routes - Service health and readiness checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, Response

from listing_sync.core.config import settings
from listing_sync.schemas.api import HealthResponse
from listing_sync.services.run_history import run_history

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health():
    """Liveness check plus the outcome of the last sync run."""
    last = run_history.last
    return HealthResponse(
        status="healthy",
        sync_running=run_history.running,
        last_sync_success=last.success if last else None,
        last_sync_at=last.ended_at if last else None,
    )


@router.get("/ready")
def readiness(response: Response):
    """
    Readiness probe - the service can only sync with full configuration.

    Returns 200 if ready, 503 listing the missing settings otherwise.
    """
    missing = settings.missing_sync_settings()
    timestamp = datetime.now(timezone.utc).isoformat()
    if missing:
        response.status_code = 503
        return {"status": "not_ready", "missing": missing, "timestamp": timestamp}
    return {"status": "ready", "timestamp": timestamp}
