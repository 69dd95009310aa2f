import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from ..exceptions import GeocodeUnavailable, GeometryUnavailable
from ..models.game import Coordinate, ResolvedLocation
from .geo_index import GeoIndex

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"

# Address keys tried in order for each field of a Nominatim response
CITY_KEYS = ("city", "town", "village", "hamlet", "municipality")
STATE_KEYS = ("state", "region", "province", "county")
LANDMARK_KEYS = (
    "tourism", "historic", "amenity", "leisure", "natural",
    "man_made", "building", "aeroway", "military",
)
NEIGHBOURHOOD_KEYS = ("neighbourhood", "suburb", "district")


class RequestThrottle:
    """
    Enforces a minimum spacing between request dispatches.

    One instance is shared by every caller in the process. Waiters queue on
    the lock, so two requests are never dispatched closer than ``interval``.
    """

    def __init__(
        self,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self):
        """Block until the next request may be sent, then claim that slot."""
        async with self._lock:
            if self._last_dispatch is not None:
                elapsed = self._clock() - self._last_dispatch
                if elapsed < self.interval:
                    await self._sleep(self.interval - elapsed)
            self._last_dispatch = self._clock()


def _first(address: Dict[str, Any], keys: Tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = address.get(key)
        # Only non-empty strings count; numbers and nested objects are skipped
        if isinstance(value, str) and value.strip():
            return value
    return None


def build_display_name(
    country: str,
    state: Optional[str] = None,
    city: Optional[str] = None,
    landmark: Optional[str] = None,
    neighbourhood: Optional[str] = None
) -> str:
    """Pick the most specific readable name available."""
    if landmark:
        return landmark
    if city and state:
        return f"{city}, {state}"
    if city:
        return f"{city}, {country}"
    if neighbourhood and state:
        return f"{neighbourhood}, {state}"
    if state:
        return f"{state}, {country}"
    return country


def parse_address(payload: Any) -> ResolvedLocation:
    """
    Build a ResolvedLocation from a Nominatim reverse response.

    Raises:
        GeocodeUnavailable: the payload is not a JSON object, or its
            country is present but not a string
    """
    if not isinstance(payload, dict):
        raise GeocodeUnavailable(f"unexpected payload type {type(payload).__name__}")
    if payload.get("error"):
        raise GeocodeUnavailable(str(payload["error"]))

    address = payload.get("address") or {}
    if not isinstance(address, dict):
        raise GeocodeUnavailable("address field is not an object")

    country = address.get("country")
    if country is not None and not isinstance(country, str):
        raise GeocodeUnavailable(f"country field is {type(country).__name__}, not a string")
    country = country or "Unknown"
    state = _first(address, STATE_KEYS)
    city = _first(address, CITY_KEYS)
    landmark = _first(address, LANDMARK_KEYS)
    neighbourhood = _first(address, NEIGHBOURHOOD_KEYS)

    return ResolvedLocation(
        country=country,
        state=state,
        city=city,
        landmark=landmark,
        neighbourhood=neighbourhood,
        display_name=build_display_name(country, state, city, landmark, neighbourhood),
    )


class LocationResolver:
    """
    Resolves coordinates to place names.

    Tries the Nominatim reverse geocoder first and falls back to a
    country-only answer from the local GeoIndex. resolve() never raises.
    """

    def __init__(
        self,
        index: GeoIndex,
        throttle: RequestThrottle,
        api_url: str = "https://nominatim.openstreetmap.org/reverse",
        user_agent: str = "PinpointGame/1.0",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.index = index
        self.throttle = throttle
        self.api_url = api_url
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "application/json"
        }
        self._transport = transport

    async def lookup(self, coord: Coordinate) -> ResolvedLocation:
        """
        Detailed reverse geocode through the remote service.

        Raises:
            GeocodeUnavailable: network error, timeout, bad status or payload
        """
        params = {
            "lat": coord.lat,
            "lon": coord.lng,
            "format": "json",
            "addressdetails": 1,
        }
        await self.throttle.wait()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.api_url, params=params, headers=self.headers)
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                raise GeocodeUnavailable(f"status {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise GeocodeUnavailable(f"{type(e).__name__}: {e}") from e
            except ValueError as e:
                raise GeocodeUnavailable("response is not JSON") from e
        return parse_address(payload)

    async def local_lookup(self, coord: Coordinate) -> ResolvedLocation:
        """Country-only answer from the local geometry."""
        try:
            await self.index.load()
            country = self.index.country_at(coord)
        except GeometryUnavailable as e:
            logger.warning(f"Local country lookup unavailable: {e}")
            country = None
        country = country or UNKNOWN_LOCATION
        return ResolvedLocation(country=country, display_name=country)

    async def resolve(self, coord: Coordinate) -> ResolvedLocation:
        try:
            return await self.lookup(coord)
        except GeocodeUnavailable as e:
            logger.warning(f"Reverse geocode for ({coord.lat:.4f}, {coord.lng:.4f}) fell back to local lookup: {e}")
        return await self.local_lookup(coord)
