from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.core.errors import NotFound
from soulscribe.models import Content, User
from soulscribe.services.scoring import Scorecard


class ContentRepository:
    """Content rows and their moderation flags.

    Flushes but never commits; the unit of work owns the transaction.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(
        self,
        user_id: int,
        text: str,
        categories: Sequence[str],
        link: str | None = None,
        image_url: str | None = None,
    ) -> Content:
        content = Content(
            user_id=user_id,
            text=text,
            link=link,
            image_url=image_url,
            categories=list(categories),
            created_at=datetime.now(timezone.utc),
            approved=False,
            rejected=False,
            token_issued=False,
        )
        self.db.add(content)
        await self.db.flush()
        return content

    async def get(self, content_id: int) -> Content | None:
        return await self.db.get(Content, content_id)

    async def get_for_update(self, content_id: int) -> Content | None:
        # Row lock on PostgreSQL; SQLite ignores FOR UPDATE.
        res = await self.db.execute(
            select(Content)
            .where(Content.id == content_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def list_by_user(self, user_id: int) -> list[Content]:
        res = await self.db.execute(select(Content).where(Content.user_id == user_id).order_by(Content.id.asc()))
        return list(res.scalars().all())

    async def list_all(self, limit: int = 10, offset: int = 0, approved_only: bool = False) -> list[tuple[Content, str]]:
        stmt = (
            select(Content, User.near_wallet)
            .join(User, User.id == Content.user_id)
            .order_by(Content.created_at.asc(), Content.id.asc())
            .limit(limit)
            .offset(offset)
        )
        if approved_only:
            stmt = stmt.where(Content.approved.is_(True))
        res = await self.db.execute(stmt)
        return [(content, wallet) for content, wallet in res.all()]

    async def _require(self, content_id: int) -> Content:
        content = await self.db.get(Content, content_id)
        if content is None:
            raise NotFound(f"content {content_id} not found")
        return content

    async def attach_analysis(self, content_id: int, scorecard: Scorecard) -> Content:
        content = await self._require(content_id)
        content.ai_analysis = scorecard.to_dict()
        await self.db.flush()
        return content

    async def set_approved(self, content_id: int) -> Content:
        content = await self._require(content_id)
        content.approved = True
        content.rejected = False
        await self.db.flush()
        return content

    async def set_rejected(self, content_id: int) -> Content:
        content = await self._require(content_id)
        content.approved = False
        content.rejected = True
        await self.db.flush()
        return content

    async def set_token_issued(self, content_id: int, token_id: str) -> Content:
        content = await self._require(content_id)
        content.token_issued = True
        content.token_id = token_id
        await self.db.flush()
        return content
