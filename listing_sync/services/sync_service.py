"""End-to-end listing sync: AppFolio unit directory -> HubDB tables."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

import httpx

from listing_sync.core.config import Settings, settings
from listing_sync.core.exceptions import HubDBError
from listing_sync.core.logging import get_logger
from listing_sync.destination.hubdb_client import HubDBClient
from listing_sync.ingestion.appfolio_source import AppFolioSource
from listing_sync.ingestion.base import BaseSource
from listing_sync.ingestion.runner import IngestionRunner
from listing_sync.schemas.listing import SourceRecord
from listing_sync.schemas.sync import DestinationTable, SyncOutcome, SyncRunResult, TablePassResult
from listing_sync.services.mutation_executor import MutationExecutor, photo_slot_fields
from listing_sync.services.normalizer import is_active, is_internet_postable, normalize

log = get_logger("sync_service")


class SyncService:
    """Runs one full synchronization pass.

    Responsibilities:
    - Fetch all listings from the source (failure => empty run)
    - Split them into active and internet-postable subsets
    - Upsert active listings into the internal table, then postable
      listings into the public table, one row at a time
    - Publish drafts for each table that received mutations
    - Return a summary with the failed listings

    No state is kept between runs; every lookup re-reads the destination.
    """

    def __init__(
        self,
        source: BaseSource,
        client: HubDBClient,
        internal_table: DestinationTable,
        public_table: DestinationTable,
        executor: Optional[MutationExecutor] = None,
    ):
        self.source = source
        self.client = client
        self.internal_table = internal_table
        self.public_table = public_table
        self.executor = executor or MutationExecutor(client)

    async def run(self) -> SyncRunResult:
        result = SyncRunResult(started_at=datetime.now(timezone.utc))

        records = await IngestionRunner(self.source).run()
        active = [rec for rec in records if is_active(rec)]
        postable = [rec for rec in active if is_internet_postable(rec)]
        result.fetched = len(records)
        result.active = len(active)
        result.postable = len(postable)

        if not active:
            log.info("No active listings fetched; nothing to sync")
            result.ended_at = datetime.now(timezone.utc)
            return result

        log.info(f"Syncing {len(active)} active listings ({len(postable)} posted to internet)")

        # Passes run one after the other: a listing can appear in both
        passes = [
            await self._sync_table(active, self.internal_table),
            await self._sync_table(postable, self.public_table),
        ]

        for table, table_pass in zip((self.internal_table, self.public_table), passes):
            if table.draft_mode and table_pass.processed > table_pass.outcomes[SyncOutcome.SKIPPED.value]:
                table_pass.published = await self._publish(table)

        result.tables = passes
        result.failed_listings = [name for table_pass in passes for name in table_pass.failed_listings]
        result.ended_at = datetime.now(timezone.utc)
        log_summary(result)
        return result

    async def _sync_table(self, records: Sequence[SourceRecord], table: DestinationTable) -> TablePassResult:
        table_pass = TablePassResult(label=table.label, table_id=table.table_id)
        for record in records:
            row = normalize(record, include_posting_flag=table.include_posting_flag)
            outcome = await self.executor.upsert(row, table)
            table_pass.record(outcome, row.name)
        log.info(f"[{table.label}] Pass finished | processed={table_pass.processed} outcomes={table_pass.outcomes}")
        return table_pass

    async def _publish(self, table: DestinationTable) -> bool:
        """Push drafts live. Failures are logged; the next run republishes."""
        try:
            await self.client.publish(table.table_id)
        except HubDBError as exc:
            log.error(f"[{table.label}] Publish failed for table {table.table_id}: {exc}")
            return False
        log.info(f"[{table.label}] Published drafts for table {table.table_id}")
        return True


def log_summary(result: SyncRunResult) -> None:
    for table_pass in result.tables:
        log.info(f"[{table_pass.label}] {table_pass.processed} listings processed")
    if result.failed_listings:
        log.error(f"{len(result.failed_listings)} listings failed to sync:")
        for name in result.failed_listings:
            log.error(f"  - {name}")
    else:
        log.info("All listings synced successfully")


def build_tables(cfg: Settings) -> List[DestinationTable]:
    """Internal and public destination tables, in sync order."""
    return [
        DestinationTable(
            table_id=cfg.HUBDB_TABLE_ID,
            label="internal",
            public_facing=False,
            draft_mode=cfg.PUBLISH_INTERNAL,
        ),
        DestinationTable(
            table_id=cfg.HUBDB_TABLE_ID_PUBLIC,
            label="public",
            public_facing=True,
            draft_mode=cfg.PUBLISH_PUBLIC,
        ),
    ]


async def run_configured_sync(
    cfg: Settings = settings,
    *,
    source_transport: Optional[httpx.AsyncBaseTransport] = None,
    hubdb_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SyncRunResult:
    """Validate settings, wire the clients and run one sync pass."""
    cfg.require_sync_settings()

    source = AppFolioSource(
        url=cfg.appfolio_url,
        client_id=cfg.APPFOLIO_CLIENT_ID,
        client_secret=cfg.APPFOLIO_CLIENT_SECRET,
        timeout=cfg.HTTP_TIMEOUT_SECONDS,
        transport=source_transport,
    )
    internal_table, public_table = build_tables(cfg)

    async with HubDBClient(
        cfg.HUBDB_BASE_URL,
        cfg.HUBSPOT_API_KEY,
        timeout=cfg.HTTP_TIMEOUT_SECONDS,
        transport=hubdb_transport,
    ) as client:
        executor = MutationExecutor(client, photo_slots=photo_slot_fields(cfg.PHOTO_SLOT_COUNT))
        service = SyncService(source, client, internal_table, public_table, executor=executor)
        return await service.run()
