from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.models import User


class UserRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_wallet(self, near_wallet: str) -> User | None:
        res = await self.db.execute(select(User).where(User.near_wallet == near_wallet))
        return res.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        res = await self.db.execute(select(User).where(User.username == username))
        return res.scalar_one_or_none()

    async def create(self, username: str, near_wallet: str, near_address: str) -> User:
        user = User(
            username=username,
            near_wallet=near_wallet,
            near_address=near_address,
            is_admin=False,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def login_with_wallet(self, near_wallet: str, near_address: str) -> tuple[User, bool]:
        """Find the wallet's user or create one. Returns (user, created)."""
        user = await self.get_by_wallet(near_wallet)
        if user:
            return user, False
        # alice.near -> alice, unless another wallet already took that handle
        username = near_wallet.split(".")[0] or near_wallet
        if await self.get_by_username(username):
            username = near_wallet
        return await self.create(username, near_wallet, near_address), True
