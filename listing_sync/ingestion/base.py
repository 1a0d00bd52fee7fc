"""Abstract source interface for ingestion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from listing_sync.schemas.listing import SourceRecord


class BaseSource(ABC):
    """Abstract base class for listing sources."""

    name: str

    @abstractmethod
    async def fetch(self) -> List[SourceRecord]:
        """Fetch every listing record; raise ``SourceFetchError`` on failure."""
