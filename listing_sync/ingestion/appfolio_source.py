"""AppFolio unit directory source implementation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from listing_sync.core.exceptions import SourceFetchError
from listing_sync.core.logging import get_logger
from listing_sync.schemas.listing import SourceRecord
from .base import BaseSource

log = get_logger("ingestion.appfolio")


class AppFolioSource(BaseSource):
    """Fetches the unit directory report with HTTP basic auth."""

    name = "appfolio"

    def __init__(
        self,
        url: str,
        client_id: str,
        client_secret: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.auth = httpx.BasicAuth(client_id, client_secret)
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> List[SourceRecord]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.url, auth=self.auth)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                "Unit directory request rejected",
                context={"url": self.url, "status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(
                f"Unit directory request failed: {exc.__class__.__name__}",
                context={"url": self.url},
            ) from exc
        except ValueError as exc:
            raise SourceFetchError("Unit directory response is not JSON", context={"url": self.url}) from exc

        items = self._extract_items(data)
        records = [SourceRecord(item) for item in items if isinstance(item, dict)]
        log.info(f"Fetched {len(records)} listings from AppFolio")
        return records

    @staticmethod
    def _extract_items(data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in ("results", "rows"):
                items = data.get(key)
                if isinstance(items, list):
                    return items
        log.warning("Unit directory response has no results/rows array")
        return []
