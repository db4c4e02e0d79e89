from __future__ import annotations

import logging
import time

import redis
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from soulscribe.core.redis import get_redis

log = logging.getLogger("soulscribe.middleware")

LATENCY_KEY = "metrics:latency_ms:last500"
COUNTS_KEY = "metrics:counts"
STATUS_KEY = "metrics:status"

# JSON-only API: responses must never be framed or cached.
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Cache-Control": "no-store",
}

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, headers: dict[str, str] | None = None) -> None:
        super().__init__(app)
        self.headers = dict(SECURITY_HEADERS if headers is None else headers)

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response

class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000.0
        r = get_redis()
        if r is not None:
            try:
                r.lpush(LATENCY_KEY, f"{ms:.3f}")
                r.ltrim(LATENCY_KEY, 0, 499)
                r.hincrby(COUNTS_KEY, "requests", 1)
                r.hincrby(STATUS_KEY, str(response.status_code), 1)
            except redis.RedisError as exc:
                # metrics must never break the API
                log.debug("metrics write failed: %s", exc)
        response.headers["Server-Timing"] = f"app;dur={ms:.2f}"
        return response
