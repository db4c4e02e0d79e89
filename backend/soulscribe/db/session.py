from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from soulscribe.core.settings import settings


def _engine_kwargs(url: str) -> dict:
    # In-memory SQLite must share one connection across sessions.
    if url.startswith("sqlite") and ":memory:" in url:
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


engine = create_async_engine(settings.database_url, **_engine_kwargs(settings.database_url))
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal


async def get_db(factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)) -> AsyncIterator[AsyncSession]:
    async with factory() as db:
        yield db
