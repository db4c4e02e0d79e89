from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List

class Settings(BaseSettings):
    env: str = "dev"
    database_url: str
    redis_url: str = ""

    jwt_secret: str
    jwt_issuer: str = "soulscribe"
    access_token_minutes: int = 60

    cors_origins: str = "http://localhost:5173"
    rate_limit_enabled: bool = True

    # memory|near
    ledger_backend: str = "memory"
    near_rpc_url: str = "https://rpc.testnet.near.org"
    near_contract_id: str = "ito-sbt-token.testnet"
    ledger_relayer_url: str = ""
    ledger_timeout_seconds: float = 15.0

    # Manual review of every submission unless a deployment opts in.
    auto_approve_on_submit: bool = False
    grammar_threshold: float = 85.0
    originality_threshold: float = 80.0
    ai_probability_threshold: float = 20.0

    @field_validator("ledger_backend")
    @classmethod
    def _known_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("memory", "near"):
            raise ValueError("LEDGER_BACKEND must be memory|near")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
