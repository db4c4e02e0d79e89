from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.api.schemas import LeaderboardEntryOut
from soulscribe.db.session import get_db
from soulscribe.services.leaderboard import MAX_LIMIT, rank

router = APIRouter(tags=["leaderboard"])

@router.get("/leaderboard", response_model=list[LeaderboardEntryOut])
async def leaderboard(limit: int = Query(default=10, ge=1, le=MAX_LIMIT), db: AsyncSession = Depends(get_db)):
    return await rank(db, limit)
