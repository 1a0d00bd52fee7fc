"""Shared fixtures: an in-memory HubDB behind httpx.MockTransport."""

import json
import os
import re
import tempfile
from typing import Any, Dict, List, Optional, Tuple

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="listing-sync-logs-"))

import httpx
import pytest
import pytest_asyncio

from listing_sync.destination.hubdb_client import HubDBClient
from listing_sync.schemas.sync import DestinationTable

HUBDB_BASE_URL = "https://hubdb.test"
INTERNAL_TABLE_ID = "internal-1"
PUBLIC_TABLE_ID = "public-1"

_ROW = re.compile(r"^/tables/(?P<table>[^/]+)/rows/(?P<row>[^/]+)$")
_ROW_DRAFT = re.compile(r"^/tables/(?P<table>[^/]+)/rows/(?P<row>[^/]+)/draft$")
_ROWS = re.compile(r"^/tables/(?P<table>[^/]+)/rows$")
_CREATE_DRAFT = re.compile(r"^/tables/(?P<table>[^/]+)/rows/draft$")
_PUBLISH = re.compile(r"^/tables/(?P<table>[^/]+)/draft/push-live$")


class FakeHubDB:
    """Minimal HubDB stand-in that records every request it serves."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.requests: List[Tuple[str, str, Any]] = []
        self.failures: Dict[Tuple[str, str], int] = {}
        self._next_id = 1000

    # -- setup helpers ------------------------------------------------------
    def add_row(self, table_id: str, values: Dict[str, Any]) -> str:
        row_id = str(self._next_id)
        self._next_id += 1
        self.tables.setdefault(table_id, []).append({"id": row_id, "values": dict(values)})
        return row_id

    def fail(self, method: str, path: str, status: int) -> None:
        self.failures[(method, path)] = status

    # -- inspection helpers -------------------------------------------------
    @property
    def calls(self) -> List[Tuple[str, str]]:
        return [(method, path) for method, path, _ in self.requests]

    def calls_for(self, table_id: str) -> List[Tuple[str, str]]:
        prefix = f"/tables/{table_id}/"
        return [call for call in self.calls if call[1].startswith(prefix)]

    def mutations_for(self, table_id: str) -> List[Tuple[str, str]]:
        return [call for call in self.calls_for(table_id) if call[0] != "GET"]

    def body_of(self, method: str, path: str) -> Optional[Any]:
        for m, p, body in reversed(self.requests):
            if m == method and p == path:
                return body
        return None

    def row(self, table_id: str, row_id: str) -> Optional[Dict[str, Any]]:
        for row in self.tables.get(table_id, []):
            if row["id"] == row_id:
                return row
        return None

    # -- transport ----------------------------------------------------------
    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append((method, path, body))

        status = self.failures.get((method, path))
        if status is not None:
            return httpx.Response(status, json={"message": "simulated failure"})

        if method == "POST" and (match := _PUBLISH.match(path)):
            return httpx.Response(204)
        if method == "POST" and (match := _CREATE_DRAFT.match(path)):
            row_id = self.add_row(match["table"], body["values"])
            return httpx.Response(201, json=self.row(match["table"], row_id))
        if method == "POST" and (match := _ROWS.match(path)):
            row_id = self.add_row(match["table"], body["values"])
            return httpx.Response(201, json=self.row(match["table"], row_id))
        if method == "GET" and (match := _ROWS.match(path)):
            return httpx.Response(200, json={"total": len(self.tables.get(match["table"], [])),
                                             "results": self.tables.get(match["table"], [])})
        if method in ("PUT", "PATCH") and (match := _ROW_DRAFT.match(path)):
            row = self.row(match["table"], match["row"])
            if row is None:
                return httpx.Response(404, json={"message": "not found"})
            if method == "PATCH":
                row["values"].update(body["values"])
            return httpx.Response(200, json=row)
        if method == "GET" and (match := _ROW.match(path)):
            row = self.row(match["table"], match["row"])
            if row is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=row)
        if method == "DELETE" and (match := _ROW.match(path)):
            rows = self.tables.get(match["table"], [])
            self.tables[match["table"]] = [r for r in rows if r["id"] != match["row"]]
            return httpx.Response(204)

        return httpx.Response(404, json={"message": f"no route for {method} {path}"})


def make_listing(**overrides: Any) -> Dict[str, Any]:
    """A complete, active, not-posted unit directory record."""
    listing = {
        "unit_address": "123 Main St, Unit 4",
        "unit_name": "Unit 4",
        "property_name": "Main Street Apartments",
        "unit_city": "Oakland",
        "unit_state": "CA",
        "unit_zip": "94612",
        "sqft": "850",
        "bedrooms": "2",
        "bathrooms": "1.5",
        "market_rent": "2450.00",
        "deposit": "2450",
        "marketing_description": "Bright two bedroom near the lake with in-unit laundry.",
        "marketing_title": "Sunny 2BR by Lake Merritt",
        "you_tube_url": "",
        "application_fee": 45,
        "amenities": "Laundry, Parking",
        "appliances": "Dishwasher",
        "utilities": "Water",
        "billed_as": "Monthly",
        "visibility": "Active",
        "posted_to_internet": "No",
    }
    listing.update(overrides)
    return listing


@pytest.fixture
def fake_hubdb():
    return FakeHubDB()


@pytest_asyncio.fixture
async def hubdb_client(fake_hubdb):
    client = HubDBClient(HUBDB_BASE_URL, "test-key", transport=httpx.MockTransport(fake_hubdb.handler))
    yield client
    await client.aclose()


@pytest.fixture
def internal_table():
    return DestinationTable(table_id=INTERNAL_TABLE_ID, label="internal", public_facing=False)


@pytest.fixture
def public_table():
    return DestinationTable(table_id=PUBLIC_TABLE_ID, label="public", public_facing=True)


@pytest.fixture
def listing_factory():
    return make_listing
