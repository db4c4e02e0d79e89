from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.models import SoulboundToken, User

MAX_LIMIT = 100


@dataclass
class LeaderboardEntry:
    user_id: int
    username: str
    near_wallet: str
    token_count: int


async def rank(db: AsyncSession, limit: int = 10) -> list[LeaderboardEntry]:
    # Users without tokens never appear; ties fall back to the older account.
    limit = min(int(limit), MAX_LIMIT)
    if limit <= 0:
        return []
    token_count = func.count(SoulboundToken.id).label("token_count")
    res = await db.execute(
        select(User.id, User.username, User.near_wallet, token_count)
        .join(SoulboundToken, SoulboundToken.user_id == User.id)
        .group_by(User.id, User.username, User.near_wallet)
        .order_by(token_count.desc(), User.id.asc())
        .limit(limit)
    )
    return [
        LeaderboardEntry(user_id=uid, username=username, near_wallet=wallet, token_count=int(count))
        for uid, username, wallet, count in res.all()
    ]
