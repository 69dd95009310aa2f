import math
from statistics import median
from typing import Dict, List, Sequence

from ..models.game import (
    ContinentShare, CountryRanking, CountryStats, GameResult, PlayerStats, StatsOverview
)
from .countries import continent_of
from .storage import KeyValueStore, RESULTS_KEY, load_models, save_models


def recompute_stats(history: Sequence[GameResult], recent: int = 10) -> PlayerStats:
    """
    Derive PlayerStats from the result history.

    Pure: the same history always yields the same stats, and nothing outside
    the history is consulted.
    """
    if not history:
        return PlayerStats()

    distances = [r.distance_km for r in history]
    zooms = [r.zoom_level for r in history]

    countries: Dict[str, CountryStats] = {}
    continents: Dict[str, int] = {}
    for result in history:
        if not result.country:
            continue
        entry = countries.get(result.country)
        if entry is None:
            entry = countries[result.country] = CountryStats(best_distance=math.inf)
        entry.count += 1
        entry.total_distance += result.distance_km
        if result.distance_km < entry.best_distance:
            entry.best_distance = result.distance_km
            entry.best_zoom_level = result.zoom_level

        continent = continent_of(result.country)
        continents[continent] = continents.get(continent, 0) + 1

    return PlayerStats(
        total_rounds=len(history),
        median_distance=median(distances),
        average_zoom_level=sum(zooms) / len(zooms),
        best_distance=min(distances),
        worst_distance=max(distances),
        recent_results=list(history[-recent:]),
        countries_visited=countries,
        continent_counts=continents,
    )


def _percent(count: int, total: int) -> int:
    # Half-up rounding, so 12.5% shows as 13%
    return math.floor(count / total * 100 + 0.5) if total > 0 else 0


def top_countries_by_accuracy(stats: PlayerStats, limit: int = 5) -> List[CountryRanking]:
    """Countries ordered by their closest guess."""
    ranked = [
        CountryRanking(country=country, stats=entry)
        for country, entry in stats.countries_visited.items()
        if math.isfinite(entry.best_distance)
    ]
    ranked.sort(key=lambda r: r.stats.best_distance)
    return ranked[:limit]


def top_countries_by_count(stats: PlayerStats, limit: int = 5) -> List[CountryRanking]:
    ranked = [CountryRanking(country=c, stats=s) for c, s in stats.countries_visited.items()]
    ranked.sort(key=lambda r: r.stats.count, reverse=True)
    return ranked[:limit]


def continent_distribution(stats: PlayerStats) -> List[ContinentShare]:
    total = sum(stats.continent_counts.values())
    shares = [
        ContinentShare(continent=continent, count=count, percentage=_percent(count, total))
        for continent, count in stats.continent_counts.items()
    ]
    shares.sort(key=lambda s: s.count, reverse=True)
    return shares


def _unique(values) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


def unique_cities(history: Sequence[GameResult]) -> List[str]:
    return _unique(r.city for r in history)


def unique_landmarks(history: Sequence[GameResult]) -> List[str]:
    return _unique(r.landmark for r in history)


class StatsAggregator:
    """Rolling result history plus the stats derived from it."""

    def __init__(self, store: KeyValueStore, history_limit: int = 100, recent: int = 10):
        self.store = store
        self.history_limit = history_limit
        self.recent = recent

    async def history(self) -> List[GameResult]:
        return await load_models(self.store, RESULTS_KEY, GameResult)

    async def record(self, result: GameResult) -> PlayerStats:
        """Append a result, evicting the oldest beyond the cap, and return fresh stats."""
        history = await self.history()
        history.append(result)
        history = history[-self.history_limit:]
        await save_models(self.store, RESULTS_KEY, history)
        return recompute_stats(history, self.recent)

    async def stats(self) -> PlayerStats:
        return recompute_stats(await self.history(), self.recent)

    async def overview(self) -> StatsOverview:
        history = await self.history()
        stats = recompute_stats(history, self.recent)
        return StatsOverview(
            stats=stats,
            top_by_accuracy=top_countries_by_accuracy(stats),
            top_by_count=top_countries_by_count(stats),
            continents=continent_distribution(stats),
            unique_cities=unique_cities(history),
            unique_landmarks=unique_landmarks(history),
        )

    async def clear(self):
        await self.store.remove(RESULTS_KEY)
