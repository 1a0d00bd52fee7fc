"""Source record and normalized destination row shapes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class SourceRecord:
    """Read-only view over one raw listing as delivered by the source provider.

    Fields may be absent, null, or of inconsistent type. Every accessor is
    total: it returns a usable value (or None) and never raises.
    """

    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def text(self, key: str) -> str:
        """String value of ``key``, or "" when absent/null."""
        value = self.data.get(key)
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return str(value)

    def number(self, key: str) -> Optional[float]:
        """Finite float parsed from ``key``, or None when absent or malformed."""
        value = self.data.get(key)
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            parsed = float(value)
        elif isinstance(value, str):
            cleaned = value.strip().replace(",", "").lstrip("$")
            if not cleaned or "_" in cleaned:
                return None
            try:
                parsed = float(cleaned)
            except ValueError:
                return None
        else:
            return None
        return parsed if math.isfinite(parsed) else None

    def flag(self, key: str) -> bool:
        """True for the literal boolean True or a case-insensitive "yes"."""
        value = self.data.get(key)
        if value is True:
            return True
        if isinstance(value, str):
            return value.strip().lower() == "yes"
        return False


class NormalizedRow(BaseModel):
    """Canonical destination row. ``address`` is the business key."""

    model_config = ConfigDict(frozen=True)

    name: str
    slug: str
    property_name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    sqft: Optional[float] = None
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    rent: Optional[float] = None
    deposit: str = ""
    description: str = ""
    title: str = ""
    youtube_url: str = ""
    application_fee: Optional[float] = None
    amenities: str = ""
    appliances: str = ""
    utilities: str = ""
    billed_as: str = ""
    meta_description: str = ""
    # Only set for the internal destination
    posted_to_internet: Optional[str] = None

    def to_values(self) -> Dict[str, Any]:
        """Destination ``values`` payload for this row."""
        values = self.model_dump()
        if self.posted_to_internet is None:
            values.pop("posted_to_internet")
        return values
