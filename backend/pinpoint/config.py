from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./pinpoint.db"

    # World geometry (world-atlas TopoJSON)
    COUNTRIES_TOPOLOGY_URL: str = "https://cdn.jsdelivr.net/npm/world-atlas@2/countries-110m.json"
    COUNTRIES_OBJECT: str = "countries"
    LAND_TOPOLOGY_URL: str = "https://cdn.jsdelivr.net/npm/world-atlas@2/land-110m.json"
    LAND_OBJECT: str = "land"
    GEOMETRY_TIMEOUT_SECONDS: float = 30.0

    # Reverse geocoding (Nominatim allows 1 request per second)
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODER_USER_AGENT: str = "PinpointGame/1.0"
    GEOCODER_MIN_INTERVAL_SECONDS: float = 1.0
    GEOCODER_TIMEOUT_SECONDS: float = 10.0

    # Leaderboard store
    LEADERBOARD_URL: str = "http://localhost:8000/HighScores/"
    LEADERBOARD_TIMEOUT_SECONDS: float = 10.0

    # Game Configuration
    MAX_SAMPLING_ATTEMPTS: int = 1000
    DAILY_SEED_STRIDE: int = 12345
    HISTORY_LIMIT: int = 100
    RECENT_RESULTS: int = 10
    DAILY_RETENTION_DAYS: int = 30
    ZOOM_LEVELS: List[int] = [12, 10, 8, 6]  # Step 0 is the closest view

    # API
    CORS_ORIGINS: List[str] = ["*"]

    LOG_LEVEL: str = "INFO"

    @property
    def max_zoom(self) -> int:
        return len(self.ZOOM_LEVELS) - 1

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
