from __future__ import annotations
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.responses import JSONResponse

from soulscribe import __version__
from soulscribe.core.errors import SoulScribeError
from soulscribe.core.settings import settings
from soulscribe.core.logging import configure_logging, log
from soulscribe.core.middleware import SecurityHeadersMiddleware, MetricsMiddleware
from soulscribe.api import auth, content, tokens, leaderboard, admin
from soulscribe.api.limits import limiter

configure_logging()

app = FastAPI(title="SoulScribe API", version=__version__)
app.state.limiter = limiter

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse({"detail": "rate limit exceeded", "retryable": True}, status_code=429)

@app.exception_handler(SoulScribeError)
async def domain_error_handler(request: Request, exc: SoulScribeError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse({"detail": exc.detail, "retryable": exc.retryable}, status_code=exc.status_code)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(content.router)
app.include_router(tokens.router)
app.include_router(leaderboard.router)
app.include_router(admin.router)

@app.get("/health")
@limiter.limit("30/minute")
async def health(request: Request):
    return {"ok": True, "env": settings.env}
