"""Maps raw unit-directory records onto the destination row shape."""

from __future__ import annotations

import re
from typing import Any, Mapping, Union

from listing_sync.schemas.listing import NormalizedRow, SourceRecord

FALLBACK_NAME = "Untitled Listing"
FALLBACK_SLUG = "untitled"
DEFAULT_CITY = "California"
META_SNIPPET_LENGTH = 100

# Source column -> destination column
TEXT_FIELDS = {
    "property_name": "property_name",
    "unit_city": "city",
    "unit_state": "state",
    "unit_zip": "zip",
    "deposit": "deposit",
    "marketing_description": "description",
    "marketing_title": "title",
    "you_tube_url": "youtube_url",
    "amenities": "amenities",
    "appliances": "appliances",
    "utilities": "utilities",
    "billed_as": "billed_as",
}
NUMERIC_FIELDS = {
    "sqft": "sqft",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "market_rent": "rent",
    "application_fee": "application_fee",
}

_NON_PRINTABLE = re.compile(r"[^\x20-\x7e]")
_SEPARATORS = re.compile(r"[\s/]+")
_NON_SLUG = re.compile(r"[^a-z0-9-]")
_HYPHENS = re.compile(r"-{2,}")

RawRecord = Union[SourceRecord, Mapping[str, Any]]


def _as_record(record: RawRecord) -> SourceRecord:
    return record if isinstance(record, SourceRecord) else SourceRecord(record)


def normalize_address_key(address: Any) -> str:
    """Business key used to match listings across runs."""
    if address is None:
        return ""
    return str(address).strip().lower()


def slugify(value: str) -> str:
    slug = _NON_PRINTABLE.sub("", value.lower())
    slug = _SEPARATORS.sub("-", slug)
    slug = _NON_SLUG.sub("", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def generate_slug(record: RawRecord) -> str:
    record = _as_record(record)
    base = record.text("unit_address").strip() or record.text("property_name").strip() or FALLBACK_SLUG
    return slugify(base) or FALLBACK_SLUG


def build_meta_description(description: str, city: str) -> str:
    if not description and not city:
        return ""
    snippet = description[:META_SNIPPET_LENGTH].strip()
    sentence = f"Rental home available in {city or DEFAULT_CITY}."
    return f"{sentence} {snippet}".strip()


def is_active(record: RawRecord) -> bool:
    return _as_record(record).text("visibility").strip().lower() == "active"


def is_internet_postable(record: RawRecord) -> bool:
    return _as_record(record).flag("posted_to_internet")


def normalize(record: RawRecord, include_posting_flag: bool = False) -> NormalizedRow:
    """Build the canonical row for ``record``. Never raises on bad input."""
    record = _as_record(record)

    address = record.text("unit_address").strip()
    values: dict[str, Any] = {
        "name": address or record.text("unit_name").strip() or FALLBACK_NAME,
        "slug": generate_slug(record),
        "address": address,
    }
    for source_key, dest_key in TEXT_FIELDS.items():
        values[dest_key] = record.text(source_key).strip()
    for source_key, dest_key in NUMERIC_FIELDS.items():
        values[dest_key] = record.number(source_key)

    values["meta_description"] = build_meta_description(values["description"], values["city"])
    if include_posting_flag:
        values["posted_to_internet"] = "yes" if record.flag("posted_to_internet") else "no"

    return NormalizedRow(**values)
