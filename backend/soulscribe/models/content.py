from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, DateTime, Boolean, CheckConstraint, ForeignKey, Integer, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from soulscribe.db.base import Base

CONTENT_CATEGORIES = ("tutorial", "review", "news", "analysis", "promo", "other")

class Content(Base):
    __tablename__ = "content"
    __table_args__ = (CheckConstraint("NOT (approved AND rejected)", name="ck_content_single_decision"),)
    id: Mapped[int] = mapped_column(Integer(), primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer(), ForeignKey("users.id"), nullable=False, index=True)

    text: Mapped[str] = mapped_column(Text(), nullable=False)
    link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    categories: Mapped[list[str]] = mapped_column(JSON(), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    ai_analysis: Mapped[dict | None] = mapped_column(JSON(), nullable=True)

    # approved and rejected are never both true; the workflow owns the transitions.
    approved: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    rejected: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    token_issued: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    token_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    @property
    def status(self) -> str:
        if self.approved:
            return "approved"
        if self.rejected:
            return "rejected"
        return "pending"
