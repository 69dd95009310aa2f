import logging
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import LeaderboardUnavailable
from ..models.daily import DailyResult
from ..models.leaderboard import DailyLeaderboard, LeaderboardRow

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
US_DASH_DATE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")

# Formats tried, in order, for dates that are neither ISO nor MM-DD-YYYY
_FREEFORM_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%a %b %d %Y",
    "%d %B %Y",
)

NUMERIC_FIELDS = ("distanceKm", "zoomLevel", "guessLat", "guessLng", "actualLat", "actualLng")


def normalize_to_iso_date(value: str) -> str:
    """
    Best-effort conversion of a stored date string to 'YYYY-MM-DD'.

    Unrecognized strings are returned unchanged.
    """
    value = value.strip()
    if ISO_DATE.match(value):
        return value

    match = US_DASH_DATE.match(value)
    if match:
        mm, dd, yyyy = match.groups()
        return f"{yyyy}-{mm}-{dd}"

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed.date().isoformat()
    except ValueError:
        pass

    # JS Date.toString() output, e.g. "Sat Jun 01 2024 00:00:00 GMT+0200 (...)"
    head = " ".join(value.split()[:4])
    for candidate in (value, head):
        for fmt in _FREEFORM_FORMATS:
            try:
                return datetime.strptime(candidate, fmt).date().isoformat()
            except ValueError:
                continue
    return value


def _to_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _format_number(value: float) -> str:
    """Render a float the way a JS client would when building row ids."""
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def leaderboard_id(date: str, player_name: str, distance_km: float) -> str:
    return f"{date}-{player_name}-{_format_number(distance_km)}"


def row_from_result(result: DailyResult) -> LeaderboardRow:
    return LeaderboardRow(
        id=leaderboard_id(result.date, result.player_name, result.distance_km),
        date=result.date,
        player_name=result.player_name,
        distance_km=result.distance_km,
        zoom_level=result.zoom_level,
        guess_lat=result.guess_lat,
        guess_lng=result.guess_lng,
        actual_lat=result.actual_lat,
        actual_lng=result.actual_lng,
        country=result.country,
        actual_display_name=result.actual_display_name,
        actual_state=result.actual_state,
        guess_country=result.guess_country,
        guess_state=result.guess_state,
        guess_city=result.guess_city,
        guess_display_name=result.guess_display_name,
    )


def parse_row(raw: Dict[str, Any]) -> Optional[LeaderboardRow]:
    """Coerce one stored record; records missing id, date or player are skipped."""
    data = dict(raw)
    for field in NUMERIC_FIELDS:
        if field in data:
            data[field] = _to_number(data[field])
    if data.get("date") is None or data.get("playerName") is None:
        return None
    data["date"] = normalize_to_iso_date(str(data["date"]))
    data["playerName"] = str(data["playerName"])
    if data.get("id") is None:
        data["id"] = f"{data['date']}-{data['playerName']}"
    else:
        data["id"] = str(data["id"])
    try:
        return LeaderboardRow.model_validate(data)
    except ValueError as e:
        logger.warning(f"Skipping malformed leaderboard row {data.get('id')}: {e}")
        return None


def _distance_key(row: LeaderboardRow) -> float:
    return row.distance_km if row.distance_km is not None else math.inf


def group_by_date(
    rows: List[LeaderboardRow],
    today: Optional[str] = None,
    player_results: Optional[Dict[str, DailyResult]] = None
) -> List[DailyLeaderboard]:
    """
    Per-day leaderboards: days newest first, rows closest first.

    ``today`` is always included, even before anyone has played it.
    """
    player_results = player_results or {}
    days: Dict[str, List[LeaderboardRow]] = {}
    for row in rows:
        days.setdefault(normalize_to_iso_date(row.date), []).append(row)
    if today:
        days.setdefault(normalize_to_iso_date(today), [])

    return [
        DailyLeaderboard(
            date=day,
            entries=sorted(days[day], key=_distance_key),
            player_result=player_results.get(day),
        )
        for day in sorted(days, reverse=True)
    ]


class LeaderboardClient:
    """Client for the HighScores leaderboard store."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.headers = {"Accept": "application/json"}
        self._transport = transport

    @staticmethod
    def _unwrap(data: Any) -> Any:
        # The store may answer with the rows directly or wrapped as {"body": ...}
        if isinstance(data, dict) and "body" in data:
            return data["body"]
        return data

    async def create(self, result: DailyResult) -> LeaderboardRow:
        """
        Submit a daily result.

        Raises:
            LeaderboardUnavailable: the store rejected or did not answer the request
        """
        row = row_from_result(result)
        payload = row.model_dump(mode="json", by_alias=True, exclude={"created_at"})
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(self.api_url, json=payload, headers=self.headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"Leaderboard submit rejected ({e.response.status_code}): {e.response.text}")
                raise LeaderboardUnavailable("submit", f"status {e.response.status_code}") from e
            except httpx.HTTPError as e:
                logger.error(f"Leaderboard submit failed: {e}")
                raise LeaderboardUnavailable("submit", str(e)) from e

        try:
            stored = self._unwrap(response.json())
        except ValueError:
            stored = None
        if isinstance(stored, dict):
            return parse_row(stored) or row
        return row

    async def list(self) -> List[LeaderboardRow]:
        """
        All leaderboard rows with dates normalized to ISO.

        Raises:
            LeaderboardUnavailable: timeout, bad status or unreadable body
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.api_url, headers=self.headers)
                response.raise_for_status()
                data = self._unwrap(response.json())
            except httpx.TimeoutException as e:
                logger.error(f"Leaderboard fetch timed out after {self.timeout}s ({self.api_url})")
                raise LeaderboardUnavailable("fetch", f"timed out after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                logger.error(f"Leaderboard fetch failed ({e.response.status_code})")
                raise LeaderboardUnavailable("fetch", f"status {e.response.status_code}") from e
            except httpx.HTTPError as e:
                logger.error(f"Leaderboard fetch failed: {e}")
                raise LeaderboardUnavailable("fetch", str(e)) from e
            except ValueError as e:
                raise LeaderboardUnavailable("fetch", "response is not JSON") from e

        if not isinstance(data, list):
            return []
        rows = (parse_row(item) for item in data if isinstance(item, dict))
        return [row for row in rows if row is not None]
