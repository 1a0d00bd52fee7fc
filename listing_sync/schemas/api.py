from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from listing_sync.schemas.sync import SyncRunResult


class HealthResponse(BaseModel):
    status: str
    sync_running: bool
    last_sync_success: bool | None
    last_sync_at: datetime | None


class SyncTriggerResponse(BaseModel):
    success: bool
    result: Optional[SyncRunResult] = None
    error: str | None = None


class RunSummaryOut(BaseModel):
    started_at: datetime
    ended_at: datetime | None
    success: bool
    fetched: int
    active: int
    postable: int
    processed: dict[str, int]
    failed_listings: list[str]

    @classmethod
    def from_result(cls, result: SyncRunResult) -> "RunSummaryOut":
        return cls(
            started_at=result.started_at,
            ended_at=result.ended_at,
            success=result.success,
            fetched=result.fetched,
            active=result.active,
            postable=result.postable,
            processed={table_pass.label: table_pass.processed for table_pass in result.tables},
            failed_listings=result.failed_listings,
        )
