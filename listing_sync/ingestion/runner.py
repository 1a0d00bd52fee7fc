"""Orchestration logic for source ingestion."""

from __future__ import annotations

from typing import List

from listing_sync.core.exceptions import SourceFetchError
from listing_sync.core.logging import get_logger
from listing_sync.schemas.listing import SourceRecord
from .base import BaseSource

log = get_logger("ingestion.runner")


class IngestionRunner:
    """Runs a source and degrades fetch failures to an empty result."""

    def __init__(self, source: BaseSource):
        self.source = source

    async def run(self) -> List[SourceRecord]:
        try:
            records = await self.source.fetch()
        except SourceFetchError as exc:
            log.error(f"Source={self.source.name} fetch failed, continuing with no listings: {exc}")
            return []
        log.info(f"Source={self.source.name} fetched={len(records)}")
        return records
