from pydantic import BaseModel, Field
from typing import Optional, List

from .game import DistanceBand, Puzzle


class DailyResult(BaseModel):
    """One completed daily round, keyed by date and player name."""
    date: str
    player_name: str
    distance_km: float
    zoom_level: int
    guess_lat: float
    guess_lng: float
    actual_lat: float
    actual_lng: float
    country: Optional[str] = None
    city: Optional[str] = None
    actual_display_name: Optional[str] = None
    actual_state: Optional[str] = None
    guess_country: Optional[str] = None
    guess_state: Optional[str] = None
    guess_city: Optional[str] = None
    guess_display_name: Optional[str] = None

    class Config:
        frozen = True


class Streak(BaseModel):
    current: int = 0
    best: int = 0


class Countdown(BaseModel):
    """Time left until the next daily puzzle."""
    hours: int
    minutes: int
    seconds: int
    total_seconds: float


class DailyPuzzleResponse(BaseModel):
    date: str
    puzzle: Puzzle
    played: bool
    countdown: Countdown


class DailyGuessRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    zoom_level: int = Field(default=0, ge=0)


class DailyGuessResponse(BaseModel):
    result: DailyResult
    band: DistanceBand
    max_zoom: int
    streak: Streak
    leaderboard_submitted: bool
    leaderboard_error: Optional[str] = None


class DailyHistoryResponse(BaseModel):
    results: List[DailyResult]
    streak: Streak
