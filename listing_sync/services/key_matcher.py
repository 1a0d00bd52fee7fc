"""Finds the destination row that holds a given listing."""

from __future__ import annotations

from typing import Any, Optional

from listing_sync.core.exceptions import HubDBError
from listing_sync.core.logging import get_logger
from listing_sync.destination.hubdb_client import HubDBClient
from listing_sync.schemas.sync import DestinationTable
from listing_sync.services.normalizer import normalize_address_key

log = get_logger("key_matcher")


class KeyMatcher:
    """Matches listings to destination rows by normalized address.

    Rows are re-listed on every lookup, so callers must not run lookups and
    creates against the same table concurrently. With duplicate addresses in
    the table, the first row in listing order wins.
    """

    def __init__(self, client: HubDBClient):
        self.client = client

    async def find_by_address(self, address: str, table: DestinationTable) -> Optional[str]:
        """Row ID of the first row whose address matches, or None.

        A failed listing call is reported as "not found" so the caller falls
        through to a create instead of aborting the batch.
        """
        key = normalize_address_key(address)
        if not key:
            return None

        try:
            rows = await self.client.list_rows(table.table_id)
        except HubDBError as exc:
            log.warning(f"[{table.label}] Lookup failed for '{address}', treating as new: {exc}")
            return None

        matches = [row for row in rows if _row_address_key(row) == key]
        if not matches:
            return None
        if len(matches) > 1:
            log.warning(
                f"[{table.label}] {len(matches)} rows share address '{address}'; "
                f"using first match {matches[0].get('id')}"
            )
        row_id = matches[0].get("id")
        return str(row_id) if row_id is not None else None


def _row_address_key(row: Any) -> str:
    """Normalized address of a listed row; malformed rows never match."""
    if not isinstance(row, dict):
        return ""
    values = row.get("values")
    if not isinstance(values, dict):
        return ""
    return normalize_address_key(values.get("address"))

