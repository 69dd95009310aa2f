import json

import httpx
import pytest

from pinpoint.exceptions import LeaderboardUnavailable
from pinpoint.models.daily import DailyResult
from pinpoint.models.leaderboard import LeaderboardRow
from pinpoint.services.leaderboard import (
    LeaderboardClient, group_by_date, leaderboard_id, normalize_to_iso_date, parse_row
)

API_URL = "https://scores.test/HighScores/"


def daily_result(date="2024-06-01", distance=343.5):
    return DailyResult(
        date=date,
        player_name="Ana",
        distance_km=distance,
        zoom_level=2,
        guess_lat=48.8566,
        guess_lng=2.3522,
        actual_lat=51.5074,
        actual_lng=-0.1278,
        country="United Kingdom",
        city="London",
        actual_display_name="London, England",
        guess_display_name="Paris, Île-de-France",
    )


def row(id, date, distance):
    return LeaderboardRow(id=id, date=date, player_name=id, distance_km=distance)


@pytest.mark.parametrize("value, expected", [
    ("2024-06-01", "2024-06-01"),
    ("06-01-2024", "2024-06-01"),
    ("2024-06-01T10:15:00Z", "2024-06-01"),
    ("2024-06-01T10:15:00.123+02:00", "2024-06-01"),
    ("06/01/2024", "2024-06-01"),
    ("June 1, 2024", "2024-06-01"),
    ("Sat Jun 01 2024 00:00:00 GMT+0200 (Central European Summer Time)", "2024-06-01"),
    ("  2024-06-01 ", "2024-06-01"),
    ("someday", "someday"),
])
def test_normalize_to_iso_date(value, expected):
    assert normalize_to_iso_date(value) == expected


def test_leaderboard_id():
    assert leaderboard_id("2024-06-01", "Ana", 343.5) == "2024-06-01-Ana-343.5"
    assert leaderboard_id("2024-06-01", "Ana", 12.0) == "2024-06-01-Ana-12"


def test_parse_row_coerces_fields():
    parsed = parse_row({
        "id": 7,
        "date": "06-01-2024",
        "playerName": "Ana",
        "distanceKm": "12.5",
        "zoomLevel": "not a number",
        "guessLat": None,
    })
    assert parsed.id == "7"
    assert parsed.date == "2024-06-01"
    assert parsed.distance_km == 12.5
    assert parsed.zoom_level is None
    assert parsed.guess_lat is None


def test_parse_row_drops_non_finite_numbers():
    parsed = parse_row({"id": "x", "date": "2024-06-01", "playerName": "Ana", "distanceKm": "NaN"})
    assert parsed.distance_km is None


def test_parse_row_builds_missing_id():
    parsed = parse_row({"date": "2024-06-01", "playerName": "Ana"})
    assert parsed.id == "2024-06-01-Ana"


def test_parse_row_skips_incomplete_records():
    assert parse_row({"id": "x", "playerName": "Ana"}) is None
    assert parse_row({"id": "x", "date": "2024-06-01"}) is None


def test_group_by_date():
    rows = [
        row("a", "2024-05-31", 300.0),
        row("b", "06-01-2024", None),
        row("c", "2024-06-01", 10.0),
        row("d", "2024-05-31", 30.0),
    ]
    mine = daily_result(date="2024-05-31")
    days = group_by_date(rows, today="2024-06-02", player_results={"2024-05-31": mine})

    assert [d.date for d in days] == ["2024-06-02", "2024-06-01", "2024-05-31"]
    assert days[0].entries == []
    assert [e.id for e in days[1].entries] == ["c", "b"]
    assert [e.id for e in days[2].entries] == ["d", "a"]
    assert days[2].player_result == mine
    assert days[1].player_result is None


async def test_create_posts_camel_case_row():
    posted = []

    def handler(request):
        body = json.loads(request.content)
        posted.append(body)
        return httpx.Response(201, json={**body, "createdAt": "2024-06-01T20:00:00+00:00"})

    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(handler))
    stored = await client.create(daily_result())

    body = posted[0]
    assert body["id"] == "2024-06-01-Ana-343.5"
    assert body["playerName"] == "Ana"
    assert body["distanceKm"] == 343.5
    assert body["guessDisplayName"] == "Paris, Île-de-France"
    assert "createdAt" not in body
    assert stored.created_at == "2024-06-01T20:00:00+00:00"


async def test_create_with_empty_response_returns_submitted_row():
    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(204)))
    stored = await client.create(daily_result())
    assert stored.id == "2024-06-01-Ana-343.5"


async def test_create_failure():
    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    with pytest.raises(LeaderboardUnavailable) as exc_info:
        await client.create(daily_result())
    assert exc_info.value.operation == "submit"


@pytest.mark.parametrize("payload", [
    [{"id": "a", "date": "2024-06-01", "playerName": "Ana", "distanceKm": 5}],
    {"body": [{"id": "a", "date": "2024-06-01", "playerName": "Ana", "distanceKm": 5}]},
])
async def test_list_accepts_plain_and_wrapped_bodies(payload):
    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=payload)))
    rows = await client.list()
    assert [(r.id, r.distance_km) for r in rows] == [("a", 5.0)]


async def test_list_skips_malformed_items():
    payload = ["junk", {"id": "a"}, {"id": "b", "date": "2024-06-01", "playerName": "Bo"}]
    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=payload)))
    assert [r.id for r in await client.list()] == ["b"]


async def test_list_non_list_body_is_empty():
    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"x": 1})))
    assert await client.list() == []


async def test_list_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    client = LeaderboardClient(API_URL, timeout=0.5, transport=httpx.MockTransport(handler))
    with pytest.raises(LeaderboardUnavailable) as exc_info:
        await client.list()
    assert exc_info.value.operation == "fetch"
    assert "timed out" in str(exc_info.value)


@pytest.mark.parametrize("response", [httpx.Response(500), httpx.Response(200, text="<html>")])
async def test_list_failures(response):
    client = LeaderboardClient(API_URL, transport=httpx.MockTransport(lambda r: response))
    with pytest.raises(LeaderboardUnavailable):
        await client.list()
