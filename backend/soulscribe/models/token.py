from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column
from soulscribe.db.base import Base

class SoulboundToken(Base):
    __tablename__ = "soulbound_tokens"
    id: Mapped[int] = mapped_column(Integer(), primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer(), ForeignKey("users.id"), nullable=False, index=True)
    # Back-reference only: removing content must not remove the token.
    content_id: Mapped[int | None] = mapped_column(
        Integer(), ForeignKey("content.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    token_id: Mapped[str] = mapped_column(String(128), nullable=False)
    token_type: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSON(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
