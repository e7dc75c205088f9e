"""pump.fun feed client for graduated tokens and per-token metadata."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.errors import UpstreamUnavailable
from app.core.logging import get_logger
from .base import BaseFeedClient, RawRecord

log = get_logger("ingestion.pumpfun")

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}


class PumpFunClient(BaseFeedClient):
    """Fetches graduated tokens from pump.fun.

    ``transport`` is handed to ``httpx.AsyncClient`` so tests can swap the
    network for an ``httpx.MockTransport``.
    """

    name = "pumpfun"

    def __init__(
        self,
        graduated_url: Optional[str] = None,
        metadata_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.graduated_url = graduated_url or settings.PUMPFUN_GRADUATED_URL
        self.metadata_url = (metadata_url or settings.PUMPFUN_METADATA_URL).rstrip("/")
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers=DEFAULT_HEADERS, transport=self._transport)

    async def list_graduated(self) -> List[RawRecord]:
        try:
            async with self._client() as client:
                resp = await client.get(self.graduated_url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            log.error(f"pump.fun graduated list returned {exc.response.status_code}: {exc.response.text[:200]}")
            raise UpstreamUnavailable(f"pump.fun API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            log.error(f"pump.fun graduated list unreachable: {exc}")
            raise UpstreamUnavailable(f"pump.fun API unreachable: {exc}") from exc
        except ValueError as exc:
            log.error(f"pump.fun graduated list returned a malformed body: {exc}")
            raise UpstreamUnavailable("pump.fun API returned malformed JSON") from exc

        records = self._unwrap(data)
        log.info(f"Fetched {len(records)} graduated tokens from pump.fun")
        return records

    async def fetch_metadata(self, address: str) -> Optional[RawRecord]:
        url = f"{self.metadata_url}/{address}"
        try:
            async with self._client() as client:
                resp = await client.get(url)
            if resp.status_code != 200:
                log.warning(f"Failed to fetch metadata for {address}: {resp.status_code}")
                return None
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            log.warning(f"Error fetching metadata for token {address}: {exc}")
            return None

        if not isinstance(data, dict):
            log.warning(f"Unexpected metadata payload for {address}: {type(data).__name__}")
            return None
        return data

    @staticmethod
    def _unwrap(data: Any) -> List[Dict[str, Any]]:
        """Accept a bare list, ``{"data": [...]}`` or ``{"coins": [...]}``."""
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict) and isinstance(data.get("data"), list):
            items = data["data"]
        elif isinstance(data, dict) and isinstance(data.get("coins"), list):
            items = data["coins"]
        else:
            log.warning(f"Unexpected response format from pump.fun: {str(data)[:200]}")
            return []
        return [item for item in items if isinstance(item, dict)]
