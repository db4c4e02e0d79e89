from __future__ import annotations

import redis
from soulscribe.core.settings import settings

def get_redis() -> redis.Redis | None:
    # Metrics are optional; no REDIS_URL means no metrics store.
    if not settings.redis_url:
        return None
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)
