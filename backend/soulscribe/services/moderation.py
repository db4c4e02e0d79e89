"""Submission, approval and rejection of content.

A content item is Pending until an admin approves it (a soulbound token is
minted on the ledger and recorded locally) or rejects it. Both outcomes are
terminal.
"""
from __future__ import annotations

import asyncio
import json
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Hashable, Sequence
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from soulscribe.core.errors import ConflictError, NotFound, UnrecordedIssuance, ValidationError
from soulscribe.models import CONTENT_CATEGORIES, Content
from soulscribe.repositories import UnitOfWork
from soulscribe.services.ledger import LedgerClient
from soulscribe.services.rewards import build_token_metadata, token_profile_for
from soulscribe.services.scoring import HeuristicScorer, ScoringStrategy

log = logging.getLogger("soulscribe.moderation")

MIN_TEXT_LENGTH = 1
MAX_TEXT_LENGTH = 5000


class KeyedLocks:
    """One asyncio.Lock per key, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[Hashable, asyncio.Lock] = weakref.WeakValueDictionary()

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        async with lock:
            yield


def _valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_submission(
    text: str,
    categories: Sequence[str],
    link: str | None = None,
    image_url: str | None = None,
) -> list[str]:
    """Check a submission and return its de-duplicated category list."""
    stripped = (text or "").strip()
    if len(stripped) < MIN_TEXT_LENGTH:
        raise ValidationError("text must not be empty")
    if len(stripped) > MAX_TEXT_LENGTH:
        raise ValidationError(f"text must be at most {MAX_TEXT_LENGTH} characters")
    if not categories:
        raise ValidationError("at least one category is required")
    unknown = sorted({c for c in categories if c not in CONTENT_CATEGORIES})
    if unknown:
        raise ValidationError(f"unknown categories: {', '.join(unknown)}")
    if link and not _valid_url(link):
        raise ValidationError("link must be an http(s) URL")
    if image_url and not _valid_url(image_url):
        raise ValidationError("image_url must be an http(s) URL")
    return list(dict.fromkeys(categories))


class ModerationWorkflow:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ledger: LedgerClient,
        scorer: ScoringStrategy | None = None,
        auto_approve: bool = False,
        locks: KeyedLocks | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.ledger = ledger
        self.scorer = scorer or HeuristicScorer()
        self.auto_approve = auto_approve
        self.locks = locks or KeyedLocks()

    async def submit(
        self,
        user_id: int,
        text: str,
        categories: Sequence[str],
        link: str | None = None,
        image_url: str | None = None,
    ) -> Content:
        categories = validate_submission(text, categories, link, image_url)
        async with UnitOfWork(self.session_factory) as uow:
            if await uow.users.get(user_id) is None:
                raise NotFound(f"user {user_id} not found")
            content = await uow.contents.create(user_id, text, categories, link or None, image_url or None)
            scorecard = self.scorer.score(text)
            await uow.contents.attach_analysis(content.id, scorecard)
        log.info("content submitted id=%s user=%s score_ok=%s", content.id, user_id, scorecard.approved)

        if self.auto_approve and scorecard.approved:
            return await self.approve(content.id, {"autoApproved": True})
        return content

    async def approve(self, content_id: int, token_metadata: dict[str, Any] | None = None) -> Content:
        # Once started, an approval runs to completion even if the caller is
        # cancelled: a minted token must never be left without a local record.
        return await asyncio.shield(self._approve(content_id, token_metadata))

    async def _approve(self, content_id: int, token_metadata: dict[str, Any] | None) -> Content:
        async with self.locks.hold(content_id):
            ledger_token_id: str | None = None
            try:
                async with UnitOfWork(self.session_factory) as uow:
                    content = await uow.contents.get_for_update(content_id)
                    if content is None:
                        raise NotFound(f"content {content_id} not found")
                    if content.rejected:
                        raise ConflictError(f"content {content_id} was already rejected")
                    if content.token_issued:
                        await uow.contents.set_approved(content_id)
                        log.info("content approved id=%s (token %s already issued)", content_id, content.token_id)
                        return content

                    owner = await uow.users.get(content.user_id)
                    if owner is None:
                        raise NotFound(f"owner of content {content_id} not found")

                    metadata = build_token_metadata(content, token_metadata)
                    ledger_token_id = await self.ledger.issue_token(
                        owner.near_wallet, json.dumps(metadata, sort_keys=True)
                    )
                    profile = token_profile_for(content.categories)
                    await uow.tokens.create(
                        user_id=owner.id,
                        content_id=content_id,
                        token_id=ledger_token_id,
                        token_type=profile.type,
                        name=profile.name,
                        description=profile.description,
                        metadata=metadata,
                    )
                    await uow.contents.set_approved(content_id)
            except BaseException as exc:
                if ledger_token_id is None:
                    raise
                log.critical(
                    "ledger token %s minted for content %s but not recorded locally: %r",
                    ledger_token_id, content_id, exc,
                )
                if not isinstance(exc, Exception):
                    raise
                raise UnrecordedIssuance(
                    f"token {ledger_token_id} exists on the ledger but could not be recorded",
                    content_id=content_id,
                    ledger_token_id=ledger_token_id,
                ) from exc

        log.info("content approved id=%s token=%s", content_id, ledger_token_id)
        return content

    async def reject(self, content_id: int) -> Content:
        async with self.locks.hold(content_id):
            async with UnitOfWork(self.session_factory) as uow:
                content = await uow.contents.get_for_update(content_id)
                if content is None:
                    raise NotFound(f"content {content_id} not found")
                if content.approved:
                    raise ConflictError(f"content {content_id} was already approved")
                await uow.contents.set_rejected(content_id)
        log.info("content rejected id=%s", content_id)
        return content
