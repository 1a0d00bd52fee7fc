"""In-process record of recent sync runs for the HTTP service."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, List, Optional

from listing_sync.core.logging import get_logger
from listing_sync.schemas.sync import SyncRunResult
from listing_sync.services.sync_service import run_configured_sync

log = get_logger("run_history")

DEFAULT_HISTORY_SIZE = 20


class RunHistory:
    """Keeps the last few results and serializes runs.

    Nothing here outlives the process; each run re-derives its state from
    the destination.
    """

    def __init__(self, maxlen: int = DEFAULT_HISTORY_SIZE):
        self._runs: Deque[SyncRunResult] = deque(maxlen=maxlen)
        self.lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self.lock.locked()

    def record(self, result: SyncRunResult) -> None:
        self._runs.append(result)

    def recent(self, limit: int = DEFAULT_HISTORY_SIZE) -> List[SyncRunResult]:
        """Most recent runs first."""
        return list(reversed(self._runs))[:limit]

    @property
    def last(self) -> Optional[SyncRunResult]:
        return self._runs[-1] if self._runs else None


run_history = RunHistory()


async def run_and_record(history: Optional[RunHistory] = None) -> SyncRunResult:
    """Run one configured sync under the history lock and record it."""
    history = history or run_history
    async with history.lock:
        result = await run_configured_sync()
        history.record(result)
        if not result.success:
            log.warning(f"Sync finished with {len(result.failed_listings)} failed listings")
        return result
