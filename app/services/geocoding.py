"""City geocoding via the Google Geocoding API.

Results are cached per normalized address for the life of the process,
including misses, so a city that cannot be resolved is not looked up again.
Concurrent lookups for the same address share one in-flight request.
Lookup failures never raise; they resolve to ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from app.core.config import settings
from app.core.constants import GEOCODING_URL
from app.models.dashboard import Coordinates

logger = logging.getLogger(__name__)


def _cache_key(address: str) -> str:
    return address.lower().strip()


class Geocoder:
    """Caching async geocoder."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = settings.GOOGLE_MAPS_API_KEY if api_key is None else api_key
        self.timeout = settings.GEOCODING_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport
        self._cache: dict[str, Coordinates | None] = {}
        self._in_flight: dict[str, asyncio.Task[Coordinates | None]] = {}

    def clear(self) -> None:
        self._cache.clear()
        self._in_flight.clear()

    async def get_coordinates(self, address: str | None) -> Coordinates | None:
        """Return the coordinates of *address*, or ``None`` if unknown."""
        if not address or not address.strip():
            return None

        key = _cache_key(address)
        if key in self._cache:
            return self._cache[key]

        task = self._in_flight.get(key)
        if task is None:
            if not self.api_key:
                self._cache[key] = None
                return None
            task = asyncio.ensure_future(self._lookup(key, address))
            self._in_flight[key] = task
            task.add_done_callback(lambda _t: self._in_flight.pop(key, None))

        # A cancelled caller must not cancel the shared lookup
        return await asyncio.shield(task)

    async def _lookup(self, key: str, address: str) -> Coordinates | None:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    GEOCODING_URL,
                    params={"address": address, "key": self.api_key},
                )
                response.raise_for_status()
                payload: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "geocoding_request_failed",
                extra={
                    "address": address,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                },
            )
            self._cache[key] = None
            return None

        coords = _parse_geocode_response(payload)
        if coords is None:
            logger.info(
                "geocoding_no_result",
                extra={"address": address, "status": payload.get("status")},
            )
        self._cache[key] = coords
        return coords


def _parse_geocode_response(payload: dict[str, Any]) -> Coordinates | None:
    if payload.get("status") != "OK":
        return None
    results = payload.get("results") or []
    if not results:
        return None
    try:
        location = results[0]["geometry"]["location"]
        return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
    except (KeyError, TypeError, ValueError):
        return None


geocoder = Geocoder()
