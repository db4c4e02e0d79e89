from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal, Optional
from datetime import datetime

Category = Literal["tutorial", "review", "news", "analysis", "promo", "other"]

class WalletLoginIn(BaseModel):
    near_wallet: str = Field(min_length=1, max_length=128)
    near_address: str = Field(min_length=1, max_length=256)

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    near_wallet: str
    near_address: str
    is_admin: bool

class LoginOut(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"

class ContentCreateIn(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    link: Optional[str] = Field(default=None, max_length=2048)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    categories: list[Category] = Field(min_length=1)

class ContentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    text: str
    link: Optional[str]
    image_url: Optional[str]
    categories: list[str]
    created_at: datetime
    ai_analysis: Optional[dict[str, Any]]
    approved: bool
    rejected: bool
    token_issued: bool
    token_id: Optional[str]
    status: str

class ContentWithWalletOut(ContentOut):
    near_wallet: str

class SoulboundTokenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    content_id: Optional[int]
    token_id: str
    token_type: str
    name: str
    description: str
    metadata: Optional[dict[str, Any]] = Field(default=None, validation_alias="metadata_")
    created_at: datetime

class LedgerTokenOut(BaseModel):
    token_id: str
    metadata: str

class LeaderboardEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    user_id: int
    username: str
    near_wallet: str
    token_count: int
