"""Create-or-update of a single listing row against one destination table.

Flow for one row:
    skip check -> lookup -> create draft            (not found)
                         -> init draft + patch draft (found)
                              -> delete + create     (patch rejected with 400/405)

Each row gets exactly one create/update attempt plus at most one recreate
fallback. Nothing is retried inside a run; the next scheduled run is the
retry path.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from listing_sync.core.exceptions import HubDBError
from listing_sync.core.logging import get_logger
from listing_sync.destination.hubdb_client import HubDBClient
from listing_sync.schemas.listing import NormalizedRow
from listing_sync.schemas.sync import DestinationTable, SyncOutcome
from listing_sync.services.key_matcher import KeyMatcher

log = get_logger("mutation_executor")

DEFAULT_PHOTO_SLOT_COUNT = 10

RECREATE_STATUSES = frozenset({400, 405})
RETRYABLE_STATUSES = frozenset({408, 429})


class FailureClass(str, Enum):
    RETRYABLE = "retryable"
    RECREATE_REQUIRED = "recreate_required"
    FATAL = "fatal"


def classify_failure(exc: HubDBError) -> FailureClass:
    """Map a destination failure onto the executor's recovery options.

    400/405 on a draft mutation means the table refuses draft patches for
    this row (seen on tables that publish immediately); the row has to be
    deleted and recreated instead.
    """
    status = exc.status_code
    if status in RECREATE_STATUSES:
        return FailureClass.RECREATE_REQUIRED
    if status is None or status in RETRYABLE_STATUSES or status >= 500:
        return FailureClass.RETRYABLE
    return FailureClass.FATAL


def photo_slot_fields(count: int = DEFAULT_PHOTO_SLOT_COUNT) -> Tuple[str, ...]:
    return tuple(f"photo_{n}" for n in range(1, count + 1))


def should_skip(row: NormalizedRow) -> bool:
    """Rows without a title or with zero rent are incomplete source data."""
    return not row.title.strip() or row.rent == 0


def protect_attachments(
    payload: Dict[str, Any],
    existing_values: Dict[str, Any],
    slots: Sequence[str],
) -> Dict[str, Any]:
    """Copy existing attachment slots into ``payload``; drop empty ones.

    Attachments are managed outside this job, so a slot is either carried
    over unchanged or left out of the mutation entirely.
    """
    protected = dict(payload)
    for slot in slots:
        current = existing_values.get(slot)
        if current:
            protected[slot] = current
        else:
            protected.pop(slot, None)
    return protected


class MutationExecutor:
    """Applies one normalized row to one destination table."""

    def __init__(
        self,
        client: HubDBClient,
        matcher: Optional[KeyMatcher] = None,
        photo_slots: Sequence[str] = photo_slot_fields(),
    ):
        self.client = client
        self.matcher = matcher or KeyMatcher(client)
        self.photo_slots = tuple(photo_slots)

    async def upsert(self, row: NormalizedRow, table: DestinationTable) -> SyncOutcome:
        if should_skip(row):
            log.warning(f"[{table.label}] Skipping '{row.name}': missing title or zero rent")
            return SyncOutcome.SKIPPED

        row_id = await self.matcher.find_by_address(row.address, table)
        payload = row.to_values()

        if row_id is None:
            return await self._create(row, table, payload)
        return await self._update(row, table, row_id, payload)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------
    async def _create(
        self, row: NormalizedRow, table: DestinationTable, payload: Dict[str, Any]
    ) -> SyncOutcome:
        try:
            await self.client.create_draft_row(table.table_id, payload)
        except HubDBError as exc:
            self._log_terminal_failure(row, table, "create", exc, payload)
            return SyncOutcome.FAILED

        log.info(f"[{table.label}] Created '{row.name}'")
        return SyncOutcome.CREATED

    async def _update(
        self,
        row: NormalizedRow,
        table: DestinationTable,
        row_id: str,
        payload: Dict[str, Any],
    ) -> SyncOutcome:
        # Read before mutating so a recreate also carries existing attachments
        payload = await self._with_protected_attachments(table, row_id, payload)
        try:
            await self.client.init_draft(table.table_id, row_id)
            await self.client.update_draft(table.table_id, row_id, payload)
        except HubDBError as exc:
            failure = classify_failure(exc)
            if failure is FailureClass.RECREATE_REQUIRED:
                log.warning(
                    f"[{table.label}] Draft update rejected for '{row.name}' "
                    f"(HTTP {exc.status_code}); recreating row {row_id}"
                )
                return await self._recreate(row, table, row_id, payload)
            self._log_terminal_failure(row, table, "update", exc, payload, failure)
            return SyncOutcome.FAILED

        log.info(f"[{table.label}] Updated '{row.name}' (row {row_id})")
        return SyncOutcome.UPDATED

    async def _recreate(
        self,
        row: NormalizedRow,
        table: DestinationTable,
        row_id: str,
        payload: Dict[str, Any],
    ) -> SyncOutcome:
        try:
            await self.client.delete_row(table.table_id, row_id)
        except HubDBError as exc:
            self._log_terminal_failure(row, table, "delete", exc, payload)
            return SyncOutcome.FAILED

        try:
            if table.recreate_live:
                await self.client.create_live_row(table.table_id, payload)
            else:
                await self.client.create_draft_row(table.table_id, payload)
        except HubDBError as exc:
            log.error(f"[{table.label}] Row {row_id} for '{row.name}' was deleted but not recreated")
            self._log_terminal_failure(row, table, "recreate", exc, payload)
            return SyncOutcome.FAILED

        target = "live" if table.recreate_live else "draft"
        log.info(f"[{table.label}] Recreated '{row.name}' ({target})")
        return SyncOutcome.RECREATED

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    async def _with_protected_attachments(
        self, table: DestinationTable, row_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        if not self.photo_slots:
            return payload
        try:
            existing = await self.client.get_row(table.table_id, row_id)
        except HubDBError as exc:
            log.warning(
                f"[{table.label}] Could not read attachments of row {row_id}; "
                f"leaving photo slots untouched: {exc}"
            )
            existing = {}
        values = existing.get("values")
        if not isinstance(values, dict):
            values = {}
        return protect_attachments(payload, values, self.photo_slots)

    @staticmethod
    def _log_terminal_failure(
        row: NormalizedRow,
        table: DestinationTable,
        step: str,
        exc: HubDBError,
        payload: Dict[str, Any],
        failure: Optional[FailureClass] = None,
    ) -> None:
        failure = failure or classify_failure(exc)
        hint = " (likely transient, next run will retry)" if failure is FailureClass.RETRYABLE else ""
        log.error(
            f"[{table.label}] Failed to {step} '{row.name}'{hint}: {exc}\n"
            f"  endpoint: {exc.method} {exc.url}\n"
            f"  status: {exc.status_code}\n"
            f"  response: {exc.response_body}\n"
            f"  payload: {json.dumps(payload, default=str)}"
        )
