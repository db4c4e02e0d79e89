from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, DateTime, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column
from soulscribe.db.base import Base

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer(), primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    near_wallet: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    near_address: Mapped[str] = mapped_column(String(256), nullable=False)
    # Only ever set outside the API (SQL console / ops tooling).
    is_admin: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
