from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.core.errors import ConflictError
from soulscribe.models import SoulboundToken
from soulscribe.repositories.content import ContentRepository


class TokenRepository:
    """Issued soulbound tokens. Insert-only."""

    def __init__(self, db: AsyncSession, contents: ContentRepository) -> None:
        self.db = db
        self.contents = contents

    async def create(
        self,
        user_id: int,
        content_id: int,
        token_id: str,
        token_type: str,
        name: str,
        description: str,
        metadata: dict[str, Any] | None = None,
    ) -> SoulboundToken:
        token = SoulboundToken(
            user_id=user_id,
            content_id=content_id,
            token_id=token_id,
            token_type=token_type,
            name=name,
            description=description,
            metadata_=metadata,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(token)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # soulbound_tokens.content_id is unique
            raise ConflictError(f"a token was already issued for content {content_id}") from exc
        # Same transaction: a token without the content flag must never commit.
        await self.contents.set_token_issued(content_id, token_id)
        return token

    async def get(self, token_pk: int) -> SoulboundToken | None:
        return await self.db.get(SoulboundToken, token_pk)

    async def get_by_content(self, content_id: int) -> SoulboundToken | None:
        res = await self.db.execute(select(SoulboundToken).where(SoulboundToken.content_id == content_id))
        return res.scalar_one_or_none()

    async def list_by_user(self, user_id: int) -> list[SoulboundToken]:
        res = await self.db.execute(
            select(SoulboundToken).where(SoulboundToken.user_id == user_id).order_by(SoulboundToken.created_at.asc(), SoulboundToken.id.asc())
        )
        return list(res.scalars().all())
