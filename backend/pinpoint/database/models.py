from datetime import datetime
from sqlalchemy import Column, String, Float, DateTime, Text
from .session import Base


class StoredValue(Base):
    """A JSON value in the player's local key/value state."""
    __tablename__ = "stored_values"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class HighScore(Base):
    """Leaderboard row; the id is '<date>-<playerName>-<distanceKm>'."""
    __tablename__ = "high_scores"

    id = Column(String(200), primary_key=True)
    date = Column(String(40), index=True, nullable=False)
    player_name = Column(String(50), nullable=False)

    # Result
    distance_km = Column(Float, nullable=True)
    zoom_level = Column(Float, nullable=True)
    guess_lat = Column(Float, nullable=True)
    guess_lng = Column(Float, nullable=True)
    actual_lat = Column(Float, nullable=True)
    actual_lng = Column(Float, nullable=True)

    # Place names shown next to the row
    country = Column(String(100), nullable=True)
    actual_display_name = Column(String(255), nullable=True)
    actual_state = Column(String(100), nullable=True)
    guess_country = Column(String(100), nullable=True)
    guess_state = Column(String(100), nullable=True)
    guess_city = Column(String(100), nullable=True)
    guess_display_name = Column(String(255), nullable=True)

    created_at = Column(String(40), nullable=False)
