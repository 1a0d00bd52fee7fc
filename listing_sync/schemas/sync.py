"""Destination table policy and sync outcome models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class SyncOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    RECREATED = "recreated"
    SKIPPED = "skipped"
    FAILED = "failed"


class DestinationTable(BaseModel):
    """One destination table and the per-table policy applied to it.

    ``public_facing`` tables never receive the posting flag, and their
    recreate fallback writes straight to live instead of draft.
    ``draft_mode`` tables get a publish call at the end of a run.
    """

    table_id: str
    label: str
    public_facing: bool = False
    draft_mode: bool = True

    @property
    def recreate_live(self) -> bool:
        return self.public_facing

    @property
    def include_posting_flag(self) -> bool:
        return not self.public_facing


class TablePassResult(BaseModel):
    """Outcome counts for one destination table pass."""

    label: str
    table_id: str
    processed: int = 0
    outcomes: Dict[str, int] = Field(default_factory=lambda: {o.value: 0 for o in SyncOutcome})
    failed_listings: List[str] = Field(default_factory=list)
    published: Optional[bool] = None

    def record(self, outcome: SyncOutcome, listing_name: str) -> None:
        self.processed += 1
        self.outcomes[outcome.value] += 1
        if outcome is SyncOutcome.FAILED:
            self.failed_listings.append(listing_name)


class SyncRunResult(BaseModel):
    """Result of one full synchronization pass."""

    started_at: datetime
    ended_at: Optional[datetime] = None
    fetched: int = 0
    active: int = 0
    postable: int = 0
    tables: List[TablePassResult] = Field(default_factory=list)
    failed_listings: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def success(self) -> bool:
        return not self.failed_listings
