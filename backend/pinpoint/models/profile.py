from pydantic import BaseModel, Field
from typing import Optional


class PlayerNameUpdate(BaseModel):
    """Schema for setting the player name."""
    name: str


class PlayerProfileResponse(BaseModel):
    name: Optional[str] = None
    has_name: bool


class SavedMapCreate(BaseModel):
    """Schema for saving a location to the collection."""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    country: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    landmark: Optional[str] = None
    display_name: str
    distance_km: Optional[float] = None


class SavedMap(SavedMapCreate):
    """A saved location in the player's collection."""
    id: str
    saved_at: str
