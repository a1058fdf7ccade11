# eventsearch/geocoding.py
"""
Free-text place lookup against Nominatim (OpenStreetMap).

Nominatim allows one request per second per application, so every outbound
call goes through one RateLimiter shared by the whole process. Callers wait
for their slot; nothing here cancels a request that is already in flight.

Failures never propagate: a timeout, transport error, non-2xx answer or
unparsable body all come back as "no places".
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .config import (
    NOMINATIM_BASE_URL,
    NOMINATIM_COUNTRY_CODES,
    NOMINATIM_USER_AGENT,
    PLACE_LOOKUP_LIMIT,
    PLACE_LOOKUP_MIN_INTERVAL_MS,
    PLACE_LOOKUP_TIMEOUT_S,
)
from .models import PlaceResult, coerce_records

logger = logging.getLogger(__name__)

MIN_PLACE_QUERY_LENGTH = 2


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

class RateLimiter:
    """
    Single-slot gate with a "not before" timestamp.

    wait() returns once at least min_interval_s has passed since the previous
    caller was let through. Callers are served one at a time, in lock order.
    clock/sleep are injectable so tests can run without real time.
    """

    def __init__(
        self,
        min_interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._not_before: Optional[float] = None

    async def wait(self) -> None:
        async with self._lock:
            if self._not_before is not None:
                delay = self._not_before - self._clock()
                if delay > 0:
                    await self._sleep(delay)
            self._not_before = self._clock() + self.min_interval_s

    async def __aenter__(self) -> "RateLimiter":
        await self.wait()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


@lru_cache(maxsize=1)
def shared_rate_limiter() -> RateLimiter:
    """The process-wide limiter for outbound geocoder calls."""
    return RateLimiter(PLACE_LOOKUP_MIN_INTERVAL_MS / 1000)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReverseGeocode:
    city: str
    street: Optional[str]
    postcode: str


def _place_row(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "display_name": item.get("display_name"),
        "latitude": item.get("lat"),
        "longitude": item.get("lon"),
        "type": item.get("type") or "place",
        "importance": item.get("importance") or 0,
    }


class NominatimClient:
    def __init__(
        self,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = NOMINATIM_USER_AGENT,
        *,
        country_codes: str = NOMINATIM_COUNTRY_CODES,
        limit: int = PLACE_LOOKUP_LIMIT,
        timeout_s: float = PLACE_LOOKUP_TIMEOUT_S,
        limiter: Optional[RateLimiter] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.country_codes = country_codes
        self.limit = limit
        self._limiter = limiter or shared_rate_limiter()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "NominatimClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _get_json(self, path: str, params: Dict[str, str]) -> Any:
        """GET + decode; returns None on any failure (already logged)."""
        url = f"{self.base_url}/{path}"
        try:
            await self._limiter.wait()
            resp = await self._client.get(
                url, params=params, headers={"User-Agent": self.user_agent}
            )
        except httpx.HTTPError as e:
            logger.warning("[places] request failed path=%s: %s: %s", path, type(e).__name__, e)
            return None

        if not resp.is_success:
            logger.warning("[places] request failed path=%s status=%d", path, resp.status_code)
            return None

        try:
            return resp.json()
        except ValueError as e:
            logger.warning("[places] invalid JSON path=%s: %s", path, e)
            return None

    async def search_places(self, query: str) -> List[PlaceResult]:
        q = (query or "").strip()
        if len(q) < MIN_PLACE_QUERY_LENGTH:
            return []

        data = await self._get_json(
            "search",
            {
                "q": q,
                "format": "json",
                "limit": str(self.limit),
                "countrycodes": self.country_codes,
                "addressdetails": "1",
            },
        )
        if not isinstance(data, list) or not data:
            return []

        places = coerce_records(
            PlaceResult, [_place_row(d) for d in data if isinstance(d, dict)]
        )
        logger.debug("[places] query=%r results=%d", q, len(places))
        return places

    async def reverse_geocode(
        self, latitude: float, longitude: float
    ) -> Optional[ReverseGeocode]:
        data = await self._get_json(
            "reverse",
            {
                "lat": str(latitude),
                "lon": str(longitude),
                "format": "json",
                "addressdetails": "1",
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("address"), dict):
            return None

        address = data["address"]
        city = (
            address.get("city")
            or address.get("town")
            or address.get("village")
            or address.get("municipality")
            or "Unbekannt"
        )
        street = None
        if address.get("road"):
            number = address.get("house_number")
            street = f"{number} {address['road']}" if number else address["road"]

        return ReverseGeocode(
            city=city,
            street=street,
            postcode=address.get("postcode") or "00000",
        )
