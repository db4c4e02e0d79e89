from __future__ import annotations

import logging

from soulscribe.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

log = logging.getLogger("soulscribe")


def configure_logging() -> None:
    # Safe to call more than once (app factory + tests).
    if any(getattr(h, "_soulscribe", False) for h in log.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._soulscribe = True  # type: ignore[attr-defined]
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if settings.env == "dev" else logging.INFO)
