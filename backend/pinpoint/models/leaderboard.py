from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional, List

from .daily import DailyResult


class LeaderboardRow(BaseModel):
    """A leaderboard record as stored by the HighScores resource (camelCase on the wire)."""
    id: str
    date: str
    player_name: str
    distance_km: Optional[float] = None
    zoom_level: Optional[float] = None
    guess_lat: Optional[float] = None
    guess_lng: Optional[float] = None
    actual_lat: Optional[float] = None
    actual_lng: Optional[float] = None
    country: Optional[str] = None
    actual_display_name: Optional[str] = None
    actual_state: Optional[str] = None
    guess_country: Optional[str] = None
    guess_state: Optional[str] = None
    guess_city: Optional[str] = None
    guess_display_name: Optional[str] = None
    created_at: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class DailyLeaderboard(BaseModel):
    date: str
    entries: List[LeaderboardRow]
    player_result: Optional[DailyResult] = None


class LeaderboardResponse(BaseModel):
    """Response with per-day leaderboards, most recent day first."""
    days: List[DailyLeaderboard]
