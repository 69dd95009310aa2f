import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from ..models.game import Coordinate
from .geo_index import GeoIndex
from .seeded import SeededSequence

logger = logging.getLogger(__name__)

RandomSource = Callable[[], float]


@dataclass(frozen=True)
class SamplingMode:
    """Latitude band and fallback point for one kind of puzzle."""
    name: str
    min_lat: float
    max_lat: float
    fallback: Coordinate


# Both bands leave out the poles; the daily band is the one every client must share
PRACTICE = SamplingMode("practice", -60.0, 70.0, Coordinate(lat=48.8566, lng=2.3522))  # Paris
DAILY = SamplingMode("daily", -70.0, 70.0, Coordinate(lat=51.5074, lng=-0.1278))  # London


class PointSampler:
    """Draws random points until one lands inside the index's geometry."""

    def __init__(self, index: GeoIndex, max_attempts: int = 1000):
        self.index = index
        self.max_attempts = max_attempts

    def _candidate(self, random: RandomSource, mode: SamplingMode) -> Coordinate:
        # Latitude is drawn before longitude
        lat = random() * (mode.max_lat - mode.min_lat) + mode.min_lat
        lng = random() * 360 - 180
        return Coordinate(lat=lat, lng=lng)

    def _search(self, sources: Iterable[RandomSource], mode: SamplingMode) -> Coordinate:
        attempts = 0
        for random in sources:
            attempts += 1
            candidate = self._candidate(random, mode)
            if self.index.contains(candidate):
                logger.debug(f"{mode.name} point found after {attempts} attempts: {candidate}")
                return candidate

        logger.warning(
            f"No {mode.name} land point after {attempts} attempts, using fallback {mode.fallback}"
        )
        return mode.fallback

    def sample(self, random: RandomSource, mode: SamplingMode = PRACTICE) -> Coordinate:
        """
        Sample a land point from a single random stream.

        Args:
            random: zero-argument callable returning floats in [0, 1),
                e.g. ``random.random`` or a SeededSequence
            mode: latitude band and fallback

        Returns:
            A coordinate on land, or ``mode.fallback`` when attempts run out
        """
        return self._search((random for _ in range(self.max_attempts)), mode)

    def sample_seeded(self, seed: int, mode: SamplingMode = DAILY, stride: int = 12345) -> Coordinate:
        """
        Sample a land point reproducibly from an integer seed.

        Attempt ``i`` draws from a fresh ``SeededSequence(seed + i * stride)``
        instead of advancing one shared stream.
        """
        sources = (SeededSequence(seed + i * stride) for i in range(self.max_attempts))
        return self._search(sources, mode)
