from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .content import ContentRepository
from .tokens import TokenRepository
from .users import UserRepository


class UnitOfWork:
    """One session, one transaction, all repositories.

    Commits when the block exits cleanly and rolls back on any exception, so
    content flags and token rows always move together.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self.users = UserRepository(self.session)
        self.contents = ContentRepository(self.session)
        self.tokens = TokenRepository(self.session, self.contents)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self.session.commit()
            else:
                await self.session.rollback()
        finally:
            await self.session.close()
