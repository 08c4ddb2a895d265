from __future__ import annotations

import logging
import time
from typing import Any, Dict

# LogRecord attributes that an ``extra`` dict must not overwrite.
RESERVED_LOG_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

OBSERVABILITY_LOGGER = "feathers_rest.observability"


def elapsed_ms(start: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - start) * 1000)


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}


def log_event(
    event: str,
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit one structured record; fields become LogRecord attributes."""
    log = logger or logging.getLogger(OBSERVABILITY_LOGGER)
    log.log(level, event, extra={"event": event, **_clean_fields(fields)})


__all__ = ["log_event", "elapsed_ms", "OBSERVABILITY_LOGGER", "RESERVED_LOG_KEYS"]
