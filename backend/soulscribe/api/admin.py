from __future__ import annotations

import statistics
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.api.content import with_wallet
from soulscribe.api.deps import get_workflow, require_admin
from soulscribe.api.schemas import ContentOut, ContentWithWalletOut
from soulscribe.core.middleware import COUNTS_KEY, LATENCY_KEY, STATUS_KEY
from soulscribe.core.redis import get_redis
from soulscribe.db.session import get_db
from soulscribe.models import Content, SoulboundToken, User
from soulscribe.repositories.content import ContentRepository
from soulscribe.services.moderation import ModerationWorkflow

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

@router.get("/content", response_model=list[ContentWithWalletOut])
async def all_content(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    rows = await ContentRepository(db).list_all(limit, offset)
    return [with_wallet(c, w) for c, w in rows]

@router.post("/content/{content_id}/approve", response_model=ContentOut)
async def approve(
    content_id: int,
    metadata: Optional[dict[str, Any]] = Body(default=None),
    workflow: ModerationWorkflow = Depends(get_workflow),
):
    return await workflow.approve(content_id, metadata)

@router.post("/content/{content_id}/reject", response_model=ContentOut)
async def reject(content_id: int, workflow: ModerationWorkflow = Depends(get_workflow)):
    return await workflow.reject(content_id)

def _metrics() -> dict | None:
    r = get_redis()
    if r is None:
        return None
    samples = r.lrange(LATENCY_KEY, 0, 499) or []
    vals = [float(x) for x in samples if x]
    p50 = statistics.median(vals) if vals else None
    p95 = statistics.quantiles(vals, n=20)[-1] if len(vals) >= 40 else (max(vals) if vals else None)
    counts = r.hgetall(COUNTS_KEY) or {}
    status = r.hgetall(STATUS_KEY) or {}
    return {
        "latency_ms_p50": p50,
        "latency_ms_p95": p95,
        "requests_total": int(counts.get("requests", 0)),
        "status_counts": {k: int(v) for k, v in status.items()},
    }

@router.get("/overview")
async def overview(db: AsyncSession = Depends(get_db)):
    approved = (await db.execute(select(func.count()).select_from(Content).where(Content.approved.is_(True)))).scalar_one()
    rejected = (await db.execute(select(func.count()).select_from(Content).where(Content.rejected.is_(True)))).scalar_one()
    total = (await db.execute(select(func.count()).select_from(Content))).scalar_one()
    tokens = (await db.execute(select(func.count()).select_from(SoulboundToken))).scalar_one()
    users = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    return {
        "moderation": {
            "pending_count": total - approved - rejected,
            "approved_count": approved,
            "rejected_count": rejected,
        },
        "tokens_issued": tokens,
        "users": users,
        "metrics": _metrics(),
    }
