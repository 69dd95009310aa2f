import pytest

from pinpoint.models.game import GameResult
from pinpoint.services.stats import (
    StatsAggregator, continent_distribution, recompute_stats,
    top_countries_by_accuracy, top_countries_by_count, unique_cities, unique_landmarks
)


def make_result(distance, zoom=0, country="France", city=None, landmark=None, n=0):
    return GameResult(
        puzzle_id=f"puzzle-{n}",
        date="2024-06-01",
        distance_km=distance,
        zoom_level=zoom,
        max_zoom=3,
        guess_lat=0.0,
        guess_lng=0.0,
        actual_lat=1.0,
        actual_lng=1.0,
        country=country,
        city=city,
        landmark=landmark,
    )


@pytest.fixture
def history():
    return [
        make_result(120.0, zoom=1, country="France", city="Paris", n=1),
        make_result(40.0, zoom=3, country="France", city="Lyon", landmark="Fourvière", n=2),
        make_result(900.0, zoom=0, country="Brazil", city="Paris", n=3),
        make_result(3000.0, zoom=2, country="Atlantis", n=4),
    ]


def test_empty_history():
    stats = recompute_stats([])
    assert stats.total_rounds == 0
    assert stats.best_distance is None
    assert stats.countries_visited == {}


def test_aggregates(history):
    stats = recompute_stats(history)
    assert stats.total_rounds == 4
    assert stats.median_distance == pytest.approx(510.0)
    assert stats.average_zoom_level == pytest.approx(1.5)
    assert stats.best_distance == 40.0
    assert stats.worst_distance == 3000.0


def test_odd_median(history):
    assert recompute_stats(history[:3]).median_distance == 120.0


def test_per_country_entries(history):
    france = recompute_stats(history).countries_visited["France"]
    assert france.count == 2
    assert france.best_distance == 40.0
    assert france.total_distance == pytest.approx(160.0)
    assert france.best_zoom_level == 3


def test_continents(history):
    stats = recompute_stats(history)
    assert stats.continent_counts == {"Europe": 2, "South America": 1, "Unknown": 1}


def test_results_without_country_are_not_counted_per_country():
    stats = recompute_stats([make_result(10.0, country=None), make_result(20.0)])
    assert stats.total_rounds == 2
    assert list(stats.countries_visited) == ["France"]


def test_recompute_is_pure(history):
    assert recompute_stats(history) == recompute_stats(list(history))
    reordered = recompute_stats(list(reversed(history)))
    forward = recompute_stats(history)
    assert reordered.median_distance == forward.median_distance
    assert reordered.countries_visited == forward.countries_visited


def test_recent_results_keeps_latest(history):
    stats = recompute_stats(history, recent=2)
    assert [r.puzzle_id for r in stats.recent_results] == ["puzzle-3", "puzzle-4"]


def test_rankings(history):
    stats = recompute_stats(history)
    assert [r.country for r in top_countries_by_accuracy(stats)] == ["France", "Brazil", "Atlantis"]
    assert top_countries_by_count(stats)[0].country == "France"
    assert [r.country for r in top_countries_by_accuracy(stats, limit=1)] == ["France"]


def test_continent_percentages_round_half_up():
    history = [make_result(1.0, country="France")] + [make_result(1.0, country="Brazil")] * 7
    shares = {s.continent: s.percentage for s in continent_distribution(recompute_stats(history))}
    assert shares == {"South America": 88, "Europe": 13}


def test_unique_places(history):
    assert unique_cities(history) == ["Paris", "Lyon"]
    assert unique_landmarks(history) == ["Fourvière"]


async def test_aggregator_caps_history(store):
    aggregator = StatsAggregator(store, history_limit=3)
    for n in range(5):
        stats = await aggregator.record(make_result(float(n + 1), n=n))

    history = await aggregator.history()
    assert [r.puzzle_id for r in history] == ["puzzle-2", "puzzle-3", "puzzle-4"]
    assert stats.total_rounds == 3
    assert stats.best_distance == 3.0


async def test_aggregator_overview_and_clear(store, history):
    aggregator = StatsAggregator(store)
    for result in history:
        await aggregator.record(result)

    overview = await aggregator.overview()
    assert overview.stats.total_rounds == 4
    assert overview.unique_cities == ["Paris", "Lyon"]
    assert overview.continents[0].continent == "Europe"
    assert overview.continents[0].percentage == 50

    await aggregator.clear()
    assert (await aggregator.stats()).total_rounds == 0
