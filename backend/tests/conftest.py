"""
Pytest configuration for tests.

Settings are read at import time, so the environment is prepared BEFORE any
soulscribe module is imported.
"""
import asyncio
import os
from datetime import datetime, timezone

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LEDGER_BACKEND"] = "memory"
os.environ["ENV"] = "test"

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from soulscribe.core.errors import ExternalServiceFailure
from soulscribe.db.base import Base
from soulscribe.models import Content, User
from soulscribe.services.ledger import InMemoryLedger
from soulscribe.services.moderation import ModerationWorkflow
from soulscribe.services.scoring import Scorecard


APPROVING_CARD = Scorecard(
    grammar=95.0,
    originality=90.0,
    readability=88.0,
    ai_generated_probability=5.0,
    keyword_strength="Low",
    topic_relevance="Low",
    predicted_engagement="Average",
    approved=True,
)


class StubScorer:
    """Deterministic scorer returning a fixed scorecard."""

    def __init__(self, card: Scorecard = APPROVING_CARD):
        self.card = card
        self.calls = []

    def score(self, text):
        self.calls.append(text)
        return self.card


class FailingLedger(InMemoryLedger):
    async def issue_token(self, owner, metadata):
        raise ExternalServiceFailure("ledger unreachable")


class ScriptedLedger(InMemoryLedger):
    """Hands out the given token ids in order."""

    def __init__(self, *token_ids):
        super().__init__()
        self._ids = list(token_ids)
        self.issued = []

    async def issue_token(self, owner, metadata):
        token_id = self._ids.pop(0)
        self.issued.append((owner, metadata, token_id))
        self.mint_calls += 1
        return token_id


@pytest.fixture
def engine(tmp_path):
    # File database + NullPool: every connection is opened on the loop using it.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'soulscribe.db'}", poolclass=NullPool)

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def scorer():
    return StubScorer()


@pytest.fixture
def workflow(session_factory, ledger, scorer):
    return ModerationWorkflow(session_factory, ledger, scorer=scorer)


async def add_user(session_factory, wallet="alice.near", is_admin=False, username=None):
    async with session_factory() as db:
        user = User(
            username=username or wallet.split(".")[0],
            near_wallet=wallet,
            near_address=f"ed25519:{wallet}",
            is_admin=is_admin,
            created_at=datetime.now(timezone.utc),
        )
        db.add(user)
        await db.commit()
        return user


async def add_content(session_factory, user_id, categories=("tutorial",), content_id=None, text="Some content."):
    async with session_factory() as db:
        content = Content(
            id=content_id,
            user_id=user_id,
            text=text,
            categories=list(categories),
            created_at=datetime.now(timezone.utc),
            approved=False,
            rejected=False,
            token_issued=False,
        )
        db.add(content)
        await db.commit()
        return content
