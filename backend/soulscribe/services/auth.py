"""Bearer tokens for wallet sessions.

A token carries the user id (``sub``) and the NEAR wallet it was issued to
(``wallet``). Both must still match the account when the token is presented.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from soulscribe.core.settings import settings

ALGORITHM = "HS256"

def create_access_token(user_id: int, wallet: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "wallet": wallet,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.access_token_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)

def decode_token(token: str) -> tuple[int, str]:
    """Return ``(user_id, wallet)``; raises JWTError for anything unusable."""
    claims = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[ALGORITHM],
        issuer=settings.jwt_issuer,
        options={"require_sub": True, "require_exp": True},
    )
    try:
        return int(claims["sub"]), str(claims["wallet"])
    except (KeyError, ValueError) as exc:
        raise JWTError("malformed session claims") from exc
