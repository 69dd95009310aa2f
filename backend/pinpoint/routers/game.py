from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import GameServices, get_services
from ..models.game import GuessRequest, GuessResponse, Puzzle
from ..services.rounds import InvalidZoom, NoActiveRound

router = APIRouter(prefix="/game", tags=["Game"])


@router.post("/puzzle", response_model=Puzzle, status_code=status.HTTP_201_CREATED)
async def start_round(services: GameServices = Depends(get_services)):
    """Start a new practice round."""
    return await services.rounds.start_practice()


@router.get("/puzzle", response_model=Puzzle)
async def get_current_round(services: GameServices = Depends(get_services)):
    """Get the practice round in progress."""
    puzzle = await services.rounds.current_practice()
    if puzzle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active round found. Start a new puzzle."
        )
    return puzzle


@router.post("/guess", response_model=GuessResponse)
async def submit_guess(
    guess: GuessRequest,
    services: GameServices = Depends(get_services)
):
    """Submit a guess for the current practice round."""
    try:
        return await services.rounds.submit_practice(guess)
    except NoActiveRound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidZoom as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
