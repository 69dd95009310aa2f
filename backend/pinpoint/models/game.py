from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal


Tier = Literal["excellent", "good", "fair", "far"]


class Coordinate(BaseModel):
    """A point on the globe in degrees."""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    class Config:
        frozen = True


class ResolvedLocation(BaseModel):
    """Place metadata for a coordinate."""
    country: str
    state: Optional[str] = None
    city: Optional[str] = None
    landmark: Optional[str] = None
    neighbourhood: Optional[str] = None
    display_name: str

    class Config:
        frozen = True


class PuzzleLocation(BaseModel):
    id: str
    lat: float
    lng: float
    country: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    landmark: Optional[str] = None


class Puzzle(BaseModel):
    """A single round's target point."""
    id: str
    location: PuzzleLocation

    class Config:
        frozen = True


class DistanceBand(BaseModel):
    label: str
    tier: Tier


class GuessRequest(BaseModel):
    """Request for submitting a guess."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    zoom_level: int = Field(default=0, ge=0)


class GuessResponse(BaseModel):
    """Response after submitting a guess."""
    puzzle_id: str
    distance_km: float
    band: DistanceBand
    zoom_used: int
    max_zoom: int
    actual_latitude: float
    actual_longitude: float
    country: Optional[str] = None


class GameResult(BaseModel):
    """One completed round, as kept in the rolling history."""
    puzzle_id: str
    date: str
    distance_km: float
    zoom_level: int
    max_zoom: int
    guess_lat: float
    guess_lng: float
    actual_lat: float
    actual_lng: float
    country: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    landmark: Optional[str] = None

    class Config:
        frozen = True


class CountryStats(BaseModel):
    count: int = 0
    best_distance: float
    total_distance: float = 0.0
    best_zoom_level: Optional[int] = None


class PlayerStats(BaseModel):
    """Aggregate view derived from the result history."""
    total_rounds: int = 0
    median_distance: float = 0.0
    average_zoom_level: float = 0.0
    best_distance: Optional[float] = None
    worst_distance: float = 0.0
    recent_results: List[GameResult] = []
    countries_visited: Dict[str, CountryStats] = {}
    continent_counts: Dict[str, int] = {}


class CountryRanking(BaseModel):
    country: str
    stats: CountryStats


class ContinentShare(BaseModel):
    continent: str
    count: int
    percentage: int


class StatsOverview(BaseModel):
    """Response with stats plus the derived rankings the stats page shows."""
    stats: PlayerStats
    top_by_accuracy: List[CountryRanking]
    top_by_count: List[CountryRanking]
    continents: List[ContinentShare]
    unique_cities: List[str]
    unique_landmarks: List[str]
