"""
Error taxonomy for the puzzle engine.

Only GeometryUnavailable and LeaderboardUnavailable ever reach the API layer.
GeocodeUnavailable is absorbed by the location resolver and MalformedStoredData
by the storage helpers.
"""
from typing import Optional


class PinpointError(Exception):
    """Base exception with a message safe to show to players."""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class GeometryUnavailable(PinpointError):
    """Raised when the world geometry cannot be fetched or decoded."""

    def __init__(self, source: str, details: Optional[str] = None):
        super().__init__(
            f"World geometry unavailable from {source}: {details}",
            "Map data could not be loaded. Please try again later."
        )
        self.source = source


class GeocodeUnavailable(PinpointError):
    """Raised when the remote reverse geocoder fails or returns junk."""

    def __init__(self, details: str):
        super().__init__(f"Reverse geocoding failed: {details}")


class LeaderboardUnavailable(PinpointError):
    """Raised when the leaderboard store cannot be read or written."""

    def __init__(self, operation: str, details: Optional[str] = None):
        super().__init__(
            f"Leaderboard {operation} failed: {details}",
            "The leaderboard is unavailable right now. Please retry."
        )
        self.operation = operation


class MalformedStoredData(PinpointError):
    """Raised when a persisted value is not valid JSON of the expected shape."""

    def __init__(self, key: str, details: Optional[str] = None):
        super().__init__(f"Stored value for '{key}' is malformed: {details}")
        self.key = key
