from fastapi import APIRouter, Depends, status

from ..dependencies import GameServices, get_services
from ..models.game import StatsOverview

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=StatsOverview)
async def get_stats(services: GameServices = Depends(get_services)):
    """Get stats derived from the recent result history."""
    return await services.stats.overview()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_stats(services: GameServices = Depends(get_services)):
    """Clear the result history."""
    await services.stats.clear()
    return None
