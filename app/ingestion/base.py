"""Abstract upstream feed interface and loose-payload helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

RawRecord = Dict[str, Any]


class BaseFeedClient(ABC):
    """Launch-platform feed of graduated tokens plus per-token metadata."""

    name: str

    @abstractmethod
    async def list_graduated(self) -> List[RawRecord]:
        """Return the current graduated list; raise UpstreamUnavailable on failure."""

    @abstractmethod
    async def fetch_metadata(self, address: str) -> Optional[RawRecord]:
        """Return enriched metadata for ``address`` or None. Never raises."""


def probe(record: Optional[RawRecord], keys: Iterable[str]) -> Any:
    """First non-empty value among ``keys``, checking a nested ``metadata`` object last."""
    if not record:
        return None
    for source in (record, record.get("metadata")):
        if not isinstance(source, dict):
            continue
        for key in keys:
            value = source.get(key)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            return value
    return None


def probe_text(records: Iterable[Optional[RawRecord]], keys: Iterable[str]) -> str:
    keys = tuple(keys)
    for record in records:
        value = probe(record, keys)
        if value is not None:
            return str(value).strip()
    return ""
