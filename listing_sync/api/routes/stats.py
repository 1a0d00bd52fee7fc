"""Stats routes - Recent sync runs."""

from fastapi import APIRouter, Query

from listing_sync.schemas.api import RunSummaryOut
from listing_sync.services.run_history import run_history

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=list[RunSummaryOut])
def get_sync_stats(
    limit: int = Query(10, ge=1, le=20, description="Number of runs to return"),
):
    """
    Recent sync runs held by this process, newest first.

    History is in memory only and resets on restart.
    """
    return [RunSummaryOut.from_result(result) for result in run_history.recent(limit)]
