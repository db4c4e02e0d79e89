from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.api.deps import get_current_user
from soulscribe.api.schemas import LedgerTokenOut, SoulboundTokenOut
from soulscribe.db.session import get_db
from soulscribe.models import User
from soulscribe.repositories.content import ContentRepository
from soulscribe.repositories.tokens import TokenRepository
from soulscribe.services.ledger import LedgerClient, get_ledger

router = APIRouter(prefix="/tokens", tags=["tokens"])

def _tokens(db: AsyncSession) -> TokenRepository:
    return TokenRepository(db, ContentRepository(db))

@router.get("/user", response_model=list[SoulboundTokenOut])
async def my_tokens(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await _tokens(db).list_by_user(user.id)

@router.get("/ledger", response_model=list[LedgerTokenOut])
async def my_ledger_tokens(user: User = Depends(get_current_user), ledger: LedgerClient = Depends(get_ledger)):
    return [LedgerTokenOut(token_id=t.token_id, metadata=t.metadata) for t in await ledger.list_tokens(user.near_wallet)]

@router.get("/{token_pk}", response_model=SoulboundTokenOut)
async def get_token(token_pk: int, db: AsyncSession = Depends(get_db)):
    token = await _tokens(db).get(token_pk)
    if not token:
        raise HTTPException(status_code=404, detail="Token not found")
    return token
