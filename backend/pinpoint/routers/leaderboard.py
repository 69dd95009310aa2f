from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import GameServices, get_services
from ..exceptions import LeaderboardUnavailable
from ..models.leaderboard import LeaderboardResponse
from ..services.leaderboard import group_by_date

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(services: GameServices = Depends(get_services)):
    """Get per-day leaderboards, most recent day first, closest guess first."""
    try:
        rows = await services.leaderboard.list()
    except LeaderboardUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.user_message
        )

    own_results = {r.date: r for r in await services.scheduler.results()}
    days = group_by_date(rows, today=services.scheduler.today(), player_results=own_results)
    return LeaderboardResponse(days=days)
