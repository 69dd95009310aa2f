from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from ..dependencies import GameServices, get_services
from ..models.profile import PlayerNameUpdate, PlayerProfileResponse, SavedMap, SavedMapCreate

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=PlayerProfileResponse)
async def get_profile(services: GameServices = Depends(get_services)):
    profile = services.profile
    return PlayerProfileResponse(name=await profile.get_name(), has_name=await profile.has_name())


@router.put("/name", response_model=PlayerProfileResponse)
async def set_player_name(
    update: PlayerNameUpdate,
    services: GameServices = Depends(get_services)
):
    """Set the name shown on the leaderboard (2-20 characters)."""
    profile = services.profile
    if not await profile.set_name(update.name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Player name must be between 2 and 20 characters."
        )
    return PlayerProfileResponse(name=await profile.get_name(), has_name=True)


@router.delete("/name", status_code=status.HTTP_204_NO_CONTENT)
async def clear_player_name(services: GameServices = Depends(get_services)):
    await services.profile.clear_name()
    return None


@router.get("/collection", response_model=List[SavedMap])
async def list_saved_maps(services: GameServices = Depends(get_services)):
    """Get all saved locations."""
    return await services.saved_maps.list()


@router.post("/collection", response_model=SavedMap, status_code=status.HTTP_201_CREATED)
async def save_map(
    entry: SavedMapCreate,
    services: GameServices = Depends(get_services)
):
    """Save a location to the collection."""
    return await services.saved_maps.save(entry)


@router.get("/collection/check")
async def is_map_saved(
    lat: float,
    lng: float,
    services: GameServices = Depends(get_services)
):
    """Check whether a location (within ~1km) is already saved."""
    return {"saved": await services.saved_maps.is_saved(lat, lng)}


@router.delete("/collection/{map_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_map(
    map_id: str,
    services: GameServices = Depends(get_services)
):
    if not await services.saved_maps.delete(map_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Saved location not found."
        )
    return None


@router.delete("/collection", status_code=status.HTTP_204_NO_CONTENT)
async def clear_saved_maps(services: GameServices = Depends(get_services)):
    await services.saved_maps.clear()
    return None
