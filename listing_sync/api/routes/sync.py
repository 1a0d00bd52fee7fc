"""Sync routes - Trigger a listing sync."""

from fastapi import APIRouter, HTTPException

from listing_sync.core.exceptions import ConfigurationError
from listing_sync.core.logging import get_logger
from listing_sync.schemas.api import SyncTriggerResponse
from listing_sync.services.run_history import run_and_record, run_history

router = APIRouter(prefix="/sync", tags=["sync"])
log = get_logger("sync_routes")


@router.post("/run", response_model=SyncTriggerResponse)
async def trigger_sync():
    """
    Run one full listing sync and wait for it to finish.

    1. Fetch the AppFolio unit directory
    2. Upsert active listings into the internal HubDB table
    3. Upsert internet-posted listings into the public HubDB table
    4. Publish drafts

    Returns 409 while another sync is running.
    """
    if run_history.running:
        raise HTTPException(status_code=409, detail="A sync is already running")

    log.info("Sync triggered via API")
    try:
        result = await run_and_record()
    except ConfigurationError as exc:
        log.error(str(exc))
        return SyncTriggerResponse(success=False, error=str(exc))

    return SyncTriggerResponse(success=result.success, result=result)
