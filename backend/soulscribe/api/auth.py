from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.api.deps import get_current_user
from soulscribe.api.limits import limiter
from soulscribe.api.schemas import LoginOut, UserOut, WalletLoginIn
from soulscribe.db.session import get_db
from soulscribe.models import User
from soulscribe.repositories.users import UserRepository
from soulscribe.services.auth import create_access_token

log = logging.getLogger("soulscribe.auth")

router = APIRouter(tags=["auth"])

@router.post("/auth/login", response_model=LoginOut)
@limiter.limit("20/minute")
async def login(request: Request, data: WalletLoginIn, db: AsyncSession = Depends(get_db)):
    # Wallet signature checks happen client side; the server only binds wallet -> user.
    user, created = await UserRepository(db).login_with_wallet(data.near_wallet, data.near_address)
    await db.commit()
    if created:
        log.info("new user id=%s wallet=%s", user.id, user.near_wallet)
    return LoginOut(user=UserOut.model_validate(user), access_token=create_access_token(user.id, user.near_wallet))

@router.get("/auth/status")
async def status(user: User = Depends(get_current_user)):
    return {"authenticated": True, "near_wallet": user.near_wallet}

@router.get("/users/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user
