"""HubDB REST client (rows, drafts, publish)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

import httpx

from listing_sync.core.exceptions import HubDBError
from listing_sync.core.logging import get_logger

log = get_logger("destination.hubdb")


class HubDBClient:
    """Thin async wrapper over the HubDB table/row endpoints.

    Every failed call raises ``HubDBError`` carrying the HTTP status (or None
    when no response arrived), the endpoint and the attempted payload.
    Usage:
        async with HubDBClient(base_url, api_key) as client:
            rows = await client.list_rows(table_id)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "HubDBClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    async def list_rows(self, table_id: str) -> List[Dict[str, Any]]:
        """All live rows of a table, following paging cursors."""
        path = f"/tables/{table_id}/rows"
        rows: List[Dict[str, Any]] = []
        params: Dict[str, Any] = {}
        seen_cursors: Set[str] = set()
        while True:
            data = await self._read_object(path, params=params)
            results = data.get("results", [])
            if not isinstance(results, list):
                raise HubDBError(
                    f"GET {path} returned malformed results ({type(results).__name__})",
                    method="GET",
                    url=f"{self.base_url}{path}",
                    response_body=str(data)[:2000],
                )
            rows.extend(results)
            paging = data.get("paging")
            next_page = paging.get("next") if isinstance(paging, dict) else None
            after = next_page.get("after") if isinstance(next_page, dict) else None
            if not after:
                return rows
            if str(after) in seen_cursors:
                log.warning(f"GET {path} repeated paging cursor {after!r}; stopping at {len(rows)} rows")
                return rows
            seen_cursors.add(str(after))
            params = {"after": after}

    async def get_row(self, table_id: str, row_id: str) -> Dict[str, Any]:
        return await self._read_object(f"/tables/{table_id}/rows/{row_id}")

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    async def create_draft_row(self, table_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/tables/{table_id}/rows/draft", json={"values": values})

    async def create_live_row(self, table_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/tables/{table_id}/rows", json={"values": values})

    async def init_draft(self, table_id: str, row_id: str) -> Dict[str, Any]:
        return await self._request("PUT", f"/tables/{table_id}/rows/{row_id}/draft", json={})

    async def update_draft(self, table_id: str, row_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "PATCH", f"/tables/{table_id}/rows/{row_id}/draft", json={"values": values}
        )

    async def delete_row(self, table_id: str, row_id: str) -> None:
        await self._request("DELETE", f"/tables/{table_id}/rows/{row_id}")

    async def publish(self, table_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/tables/{table_id}/draft/push-live")

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            raise HubDBError(
                f"{method} {path} failed: {exc.__class__.__name__}: {exc}",
                method=method,
                url=url,
                payload=json,
            ) from exc

        if resp.is_error:
            raise HubDBError(
                f"{method} {path} returned HTTP {resp.status_code}",
                method=method,
                url=url,
                status_code=resp.status_code,
                payload=json,
                response_body=resp.text[:2000],
            )

        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            log.warning(f"Non-JSON response from {method} {path}")
            return {}

    async def _read_object(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET that must answer with a JSON object; anything else is a failed read."""
        body = await self._request("GET", path, params=params)
        if not isinstance(body, dict):
            raise HubDBError(
                f"GET {path} returned a JSON {type(body).__name__}, expected an object",
                method="GET",
                url=f"{self.base_url}{path}",
                response_body=str(body)[:2000],
            )
        return body
