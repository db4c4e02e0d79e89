from __future__ import annotations
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from soulscribe.core.settings import settings
from soulscribe.db.session import get_db, get_session_factory
from soulscribe.models import User
from soulscribe.services.auth import decode_token
from soulscribe.services.ledger import LedgerClient, get_ledger
from soulscribe.services.moderation import KeyedLocks, ModerationWorkflow
from soulscribe.services.scoring import ApprovalThresholds, HeuristicScorer, ScoringStrategy

bearer = HTTPBearer(auto_error=False)

# Shared across requests so approvals of one content id queue up in-process.
content_locks = KeyedLocks()

async def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(status_code=401, detail="Missing token")
    try:
        uid, wallet = decode_token(cred.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = await db.get(User, uid)
    if not user or user.near_wallet != wallet:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user

async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden: Admin access required")
    return user

def get_scorer() -> ScoringStrategy:
    return HeuristicScorer(
        thresholds=ApprovalThresholds(
            grammar=settings.grammar_threshold,
            originality=settings.originality_threshold,
            ai_probability=settings.ai_probability_threshold,
        )
    )

def get_workflow(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    ledger: LedgerClient = Depends(get_ledger),
    scorer: ScoringStrategy = Depends(get_scorer),
) -> ModerationWorkflow:
    return ModerationWorkflow(
        factory,
        ledger,
        scorer=scorer,
        auto_approve=settings.auto_approve_on_submit,
        locks=content_locks,
    )
