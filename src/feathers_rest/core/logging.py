import logging
import os
from typing import Any, Iterable, Optional

LOG_EXTRA_FIELDS = (
    "call_id",
    "method",
    "url",
    "status",
    "duration_ms",
    "error_type",
)


class LogfmtFormatter(logging.Formatter):
    """logfmt line per record; call fields are appended when present."""

    def __init__(self, fields: Iterable[str] = LOG_EXTRA_FIELDS):
        super().__init__()
        self.fields = tuple(fields)

    def format(self, record: logging.LogRecord) -> str:
        kv = [f"level={record.levelname.lower()}", f"logger={record.name}"]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={_quote(msg)}")

        kv.extend(
            f"{key}={_quote(getattr(record, key))}"
            for key in self.fields
            if getattr(record, key, None) is not None
        )

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")
        return " ".join(kv)


def _quote(val: Any) -> str:
    if isinstance(val, (int, float, bool)):
        return str(val)
    s = str(val)
    if " " in s or "=" in s or '"' in s:
        s = '"' + s.replace('"', '\\"') + '"'
    return s


def setup_logging(level: Optional[str] = None) -> None:
    """Route the feathers_rest loggers through a single logfmt handler."""
    level = level or os.getenv("FEATHERS_LOG_LEVEL", "INFO")

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
