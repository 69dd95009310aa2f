import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import GeometryUnavailable
from ..models.game import Coordinate
from .countries import country_name
from .topology import GeoFeature, decode_features

logger = logging.getLogger(__name__)


class GeoIndex:
    """
    Lazily loaded world geometry answering land and country lookups.

    The feature set is fetched once per instance and never invalidated.
    Concurrent first callers of load() wait on the same fetch.
    """

    def __init__(
        self,
        url: str,
        object_name: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.object_name = object_name
        self.timeout = timeout
        self._transport = transport
        self._features: Optional[List[GeoFeature]] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_topology(cls, topology: Dict[str, Any], object_name: str) -> "GeoIndex":
        """Build an already-loaded index from a topology document (a frozen snapshot)."""
        index = cls(url="memory://", object_name=object_name)
        index._features = decode_features(topology, object_name)
        return index

    @property
    def loaded(self) -> bool:
        return self._features is not None

    async def load(self) -> List[GeoFeature]:
        """
        Return the feature set, fetching it on first use.

        Raises:
            GeometryUnavailable: the topology could not be fetched or decoded
        """
        if self._features is not None:
            return self._features

        async with self._lock:
            if self._features is None:
                self._features = await self._fetch()
        return self._features

    async def _fetch(self) -> List[GeoFeature]:
        logger.info(f"Loading world geometry '{self.object_name}' from {self.url}")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.url)
                response.raise_for_status()
                topology = response.json()
            except httpx.HTTPError as e:
                logger.error(f"Geometry fetch from {self.url} failed: {e}")
                raise GeometryUnavailable(self.url, str(e)) from e
            except ValueError as e:
                logger.error(f"Geometry document from {self.url} is not JSON: {e}")
                raise GeometryUnavailable(self.url, "invalid JSON") from e

        try:
            features = decode_features(topology, self.object_name)
        except (ValueError, KeyError, TypeError, IndexError) as e:
            logger.error(f"Geometry document from {self.url} could not be decoded: {e}")
            raise GeometryUnavailable(self.url, f"undecodable topology: {e}") from e

        logger.info(f"Loaded {len(features)} features from '{self.object_name}'")
        return features

    def _require_features(self) -> List[GeoFeature]:
        if self._features is None:
            raise RuntimeError("GeoIndex.load() must complete before lookups")
        return self._features

    def contains(self, coord: Coordinate) -> bool:
        """True when the point lies inside (or on the edge of) any feature."""
        return any(f.covers(coord.lng, coord.lat) for f in self._require_features())

    def country_at(self, coord: Coordinate) -> Optional[str]:
        """Name of the first feature containing the point, or None over water."""
        for feature in self._require_features():
            if not feature.covers(coord.lng, coord.lat):
                continue
            name = country_name(feature.id, feature.name)
            if name:
                return name
        return None
