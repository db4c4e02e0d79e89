from __future__ import annotations
from slowapi import Limiter
from slowapi.util import get_remote_address
from soulscribe.core.settings import settings

# Keyed on remote address in memory only; addresses are never persisted.
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
