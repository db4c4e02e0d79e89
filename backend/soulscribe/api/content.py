from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from soulscribe.api.deps import get_current_user, get_workflow
from soulscribe.api.limits import limiter
from soulscribe.api.schemas import ContentCreateIn, ContentOut, ContentWithWalletOut
from soulscribe.db.session import get_db
from soulscribe.models import CONTENT_CATEGORIES, Content, User
from soulscribe.repositories.content import ContentRepository
from soulscribe.services.moderation import ModerationWorkflow

router = APIRouter(prefix="/content", tags=["content"])

def with_wallet(content: Content, wallet: str) -> ContentWithWalletOut:
    return ContentWithWalletOut(**ContentOut.model_validate(content).model_dump(), near_wallet=wallet)

@router.post("", response_model=ContentOut, status_code=201)
@limiter.limit("10/minute")
async def submit(
    request: Request,
    data: ContentCreateIn,
    user: User = Depends(get_current_user),
    workflow: ModerationWorkflow = Depends(get_workflow),
):
    return await workflow.submit(user.id, data.text, data.categories, data.link, data.image_url)

@router.get("/categories", response_model=list[str])
async def categories():
    return list(CONTENT_CATEGORIES)

@router.get("/user", response_model=list[ContentOut])
async def my_content(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await ContentRepository(db).list_by_user(user.id)

@router.get("/feed", response_model=list[ContentWithWalletOut])
async def feed(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    rows = await ContentRepository(db).list_all(limit, offset, approved_only=True)
    return [with_wallet(c, w) for c, w in rows]

@router.get("/{content_id}", response_model=ContentOut)
async def get_content(content_id: int, db: AsyncSession = Depends(get_db)):
    content = await ContentRepository(db).get(content_id)
    if not content:
        raise HTTPException(status_code=404, detail="Content not found")
    return content
