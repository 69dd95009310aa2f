from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional

from ..dependencies import GameServices, get_services
from ..exceptions import LeaderboardUnavailable
from ..models.daily import (
    Countdown, DailyGuessRequest, DailyGuessResponse, DailyHistoryResponse,
    DailyPuzzleResponse, DailyResult, Streak
)
from ..models.leaderboard import LeaderboardRow
from ..services.rounds import AlreadyPlayed, InvalidZoom, MissingPlayerName, NoActiveRound

router = APIRouter(prefix="/daily", tags=["Daily"])


@router.get("", response_model=DailyPuzzleResponse)
async def get_daily_puzzle(services: GameServices = Depends(get_services)):
    """Get today's puzzle; the same for every player on the same date."""
    scheduler = services.scheduler
    today = scheduler.today()
    return DailyPuzzleResponse(
        date=today,
        puzzle=await scheduler.puzzle_for(today),
        played=await scheduler.has_played(today),
        countdown=scheduler.countdown(),
    )


@router.post("/guess", response_model=DailyGuessResponse)
async def submit_daily_guess(
    guess: DailyGuessRequest,
    services: GameServices = Depends(get_services)
):
    """Submit today's guess. Each date can be played once."""
    try:
        return await services.rounds.submit_daily(guess)
    except MissingPlayerName as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidZoom as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AlreadyPlayed as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/resubmit", response_model=LeaderboardRow)
async def resubmit_daily_result(
    date: Optional[str] = None,
    services: GameServices = Depends(get_services)
):
    """Retry a leaderboard submission that failed earlier."""
    try:
        return await services.rounds.retry_leaderboard(date)
    except NoActiveRound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except LeaderboardUnavailable as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.user_message)


@router.get("/results", response_model=DailyHistoryResponse)
async def get_daily_results(services: GameServices = Depends(get_services)):
    """Get the retained daily results, newest first."""
    return DailyHistoryResponse(
        results=await services.scheduler.results(),
        streak=await services.scheduler.streak(),
    )


@router.get("/today", response_model=DailyResult)
async def get_todays_result(services: GameServices = Depends(get_services)):
    """Get today's result if it has been played."""
    scheduler = services.scheduler
    result = await scheduler.result_for(scheduler.today())
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Today's puzzle has not been played yet."
        )
    return result


@router.get("/streak", response_model=Streak)
async def get_streak(services: GameServices = Depends(get_services)):
    return await services.scheduler.streak()


@router.get("/countdown", response_model=Countdown)
async def get_countdown(services: GameServices = Depends(get_services)):
    """Time until the next daily puzzle (local midnight)."""
    return services.scheduler.countdown()
