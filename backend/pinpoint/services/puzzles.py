import logging
import random
import uuid
from typing import Callable, Dict

from ..models.game import Coordinate, Puzzle, PuzzleLocation
from .geo_index import GeoIndex
from .geocoding import LocationResolver
from .sampler import DAILY, PRACTICE, PointSampler, RandomSource
from .seeded import date_to_seed

logger = logging.getLogger(__name__)


def _unique_suffix() -> str:
    return uuid.uuid4().hex[:12]


class PuzzleGenerator:
    """
    Builds practice and daily puzzles.

    Practice points come from an entropy source over the country shapes; daily
    points come from the date seed over the land shapes, so every client that
    shares the land snapshot derives the same point.
    """

    def __init__(
        self,
        countries: GeoIndex,
        land: GeoIndex,
        resolver: LocationResolver,
        max_attempts: int = 1000,
        seed_stride: int = 12345,
        entropy: RandomSource = random.random,
        id_suffix: Callable[[], str] = _unique_suffix
    ):
        self.countries = countries
        self.land = land
        self.resolver = resolver
        self.seed_stride = seed_stride
        self.entropy = entropy
        self.id_suffix = id_suffix
        self._practice_sampler = PointSampler(countries, max_attempts)
        self._daily_sampler = PointSampler(land, max_attempts)
        self._daily_cache: Dict[str, Puzzle] = {}

    async def daily_point(self, date_str: str) -> Coordinate:
        await self.land.load()
        return self._daily_sampler.sample_seeded(date_to_seed(date_str), DAILY, self.seed_stride)

    async def _build(self, puzzle_id: str, location_id: str, point: Coordinate) -> Puzzle:
        details = await self.resolver.resolve(point)
        return Puzzle(
            id=puzzle_id,
            location=PuzzleLocation(
                id=location_id,
                lat=point.lat,
                lng=point.lng,
                country=details.country,
                city=details.city,
                state=details.state,
                landmark=details.landmark,
            ),
        )

    async def practice(self) -> Puzzle:
        """A fresh puzzle with a generation-time-unique id."""
        await self.countries.load()
        point = self._practice_sampler.sample(self.entropy, PRACTICE)
        suffix = self.id_suffix()
        return await self._build(f"puzzle-{suffix}", f"loc-{suffix}", point)

    async def daily(self, date_str: str) -> Puzzle:
        """
        The puzzle for a calendar day ('YYYY-MM-DD').

        Memoized per date; the point itself is a pure function of the date and
        the land geometry.
        """
        cached = self._daily_cache.get(date_str)
        if cached is not None:
            return cached

        point = await self.daily_point(date_str)
        puzzle = await self._build(f"daily-{date_str}", f"daily-loc-{date_str}", point)
        logger.info(f"Daily puzzle for {date_str}: {point.lat:.4f}, {point.lng:.4f}")
        self._daily_cache[date_str] = puzzle
        return puzzle
