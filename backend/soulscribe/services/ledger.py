"""Clients for the soulbound-token ledger contract.

The contract exposes two methods: ``mint(accountId, metadata) -> tokenId`` and
``get_tokens(accountId) -> [{id, metadata}]``. Everything else about the chain
is opaque to this service.
"""
from __future__ import annotations

import asyncio
import base64
import json
import logging
import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

import aiohttp

from soulscribe.core.errors import ExternalServiceFailure
from soulscribe.core.settings import settings

log = logging.getLogger("soulscribe.ledger")


@dataclass(frozen=True)
class LedgerToken:
    token_id: str
    metadata: str


class LedgerClient(Protocol):
    async def issue_token(self, owner: str, metadata: str) -> str: ...

    async def list_tokens(self, owner: str) -> list[LedgerToken]: ...


class InMemoryLedger:
    """Process-local ledger with the contract's id scheme, for dev and tests."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._tokens: dict[str, list[LedgerToken]] = {}
        self.mint_calls = 0

    async def issue_token(self, owner: str, metadata: str) -> str:
        if not owner:
            raise ExternalServiceFailure("ledger mint requires an owner account")
        existing = self._tokens.setdefault(owner, [])
        token_id = f"{self._rng.randint(100_000_000_000, 999_999_999_999)}-{len(existing) + 1}"
        existing.append(LedgerToken(token_id=token_id, metadata=metadata))
        self.mint_calls += 1
        return token_id

    async def list_tokens(self, owner: str) -> list[LedgerToken]:
        return list(self._tokens.get(owner, []))


class NearLedgerClient:
    """Talks to the NEAR contract.

    View calls go straight to JSON-RPC. Minting is a signed change call, so it
    is delegated to a relayer holding the signing key: ``POST {relayer}/mint``
    with ``{"contract_id", "account_id", "metadata"}`` answering
    ``{"token_id": ...}``.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_id: str,
        relayer_url: str = "",
        timeout: float = 15.0,
        session: Any = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.contract_id = contract_id
        self.relayer_url = relayer_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    async def issue_token(self, owner: str, metadata: str) -> str:
        if not self.relayer_url:
            raise ExternalServiceFailure("no ledger relayer configured for minting")
        payload = {"contract_id": self.contract_id, "account_id": owner, "metadata": metadata}
        data = await self._post_json(f"{self.relayer_url}/mint", payload)
        token_id = data.get("token_id") if isinstance(data, dict) else None
        if not token_id:
            raise ExternalServiceFailure(f"relayer returned no token id: {data!r}")
        log.info("ledger minted token=%s owner=%s", token_id, owner)
        return str(token_id)

    async def list_tokens(self, owner: str) -> list[LedgerToken]:
        raw = await self.view("get_tokens", {"accountId": owner})
        try:
            return [LedgerToken(token_id=str(t["id"]), metadata=t.get("metadata", "")) for t in raw or []]
        except (AttributeError, KeyError, TypeError) as exc:
            raise ExternalServiceFailure(f"ledger returned malformed tokens for {owner}: {raw!r:.200}") from exc

    async def view(self, method: str, args: dict[str, Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": "soulscribe",
            "method": "query",
            "params": {
                "request_type": "call_function",
                "finality": "final",
                "account_id": self.contract_id,
                "method_name": method,
                "args_base64": base64.b64encode(json.dumps(args).encode("utf-8")).decode("ascii"),
            },
        }
        data = await self._post_json(self.rpc_url, payload)
        if not isinstance(data, dict):
            raise ExternalServiceFailure(f"ledger rpc returned {type(data).__name__}, expected an object")
        if "error" in data:
            raise ExternalServiceFailure(f"ledger rpc error: {data['error']}")
        result = data.get("result") or {}
        if not isinstance(result, dict):
            raise ExternalServiceFailure(f"ledger view {method} returned a malformed result")
        if "error" in result:
            raise ExternalServiceFailure(f"ledger view {method} failed: {result['error']}")
        try:
            return json.loads(bytes(result.get("result", [])).decode("utf-8") or "null")
        except (TypeError, ValueError) as exc:
            raise ExternalServiceFailure(f"ledger view {method} returned undecodable data: {exc}") from exc

    async def _post_json(self, url: str, payload: dict[str, Any]) -> Any:
        try:
            if self._session is not None:
                return await self._send(self._session, url, payload)
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                return await self._send(session, url, payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            log.warning("ledger call to %s failed: %s", url, exc)
            raise ExternalServiceFailure(f"ledger unreachable: {exc}") from exc

    async def _send(self, session: Any, url: str, payload: dict[str, Any]) -> Any:
        async with session.post(url, json=payload) as resp:
            if resp.status >= 400:
                body = await resp.text()
                raise ExternalServiceFailure(f"ledger returned HTTP {resp.status}: {body[:200]}")
            try:
                return await resp.json()
            except ValueError as exc:
                raise ExternalServiceFailure(f"ledger returned a non-JSON body from {url}") from exc


@lru_cache(maxsize=1)
def get_ledger() -> LedgerClient:
    if settings.ledger_backend == "near":
        return NearLedgerClient(
            settings.near_rpc_url,
            settings.near_contract_id,
            settings.ledger_relayer_url,
            settings.ledger_timeout_seconds,
        )
    return InMemoryLedger()
