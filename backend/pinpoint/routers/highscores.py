from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models import HighScore
from ..database.session import get_db
from ..models.leaderboard import LeaderboardRow

# The leaderboard store itself; LeaderboardClient talks to it over HTTP
router = APIRouter(prefix="/HighScores", tags=["HighScores"])


@router.get("/", response_model=List[LeaderboardRow])
async def list_high_scores(db: AsyncSession = Depends(get_db)):
    """Get every leaderboard row."""
    result = await db.execute(select(HighScore).order_by(HighScore.date, HighScore.distance_km))
    return result.scalars().all()


@router.post("/", response_model=LeaderboardRow, status_code=status.HTTP_201_CREATED)
async def create_high_score(
    row: LeaderboardRow,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Create a leaderboard row. Re-posting an existing id returns the stored row."""
    existing = await db.get(HighScore, row.id)
    if existing:
        response.status_code = status.HTTP_200_OK
        return existing

    record = HighScore(
        **row.model_dump(exclude={"created_at"}),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record
