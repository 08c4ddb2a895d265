from __future__ import annotations

from typing import Any, Dict, Optional

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"
PARSING_FAILURE_MESSAGE = "Parsing failure!"
NO_VALID_RESPONSE_MESSAGE = "No valid response found"


class FeathersError(Exception):
    """Normalized error delivered for every failed service call."""

    def __init__(self, payload: Optional[Dict[str, Any]] = None):
        payload = dict(payload or {})
        if not payload:
            payload = {"message": UNKNOWN_ERROR_MESSAGE}
        self.payload = payload
        super().__init__(str(payload.get("message") or payload))

    @classmethod
    def from_reason(cls, reason: str) -> "FeathersError":
        return cls({"message": reason})

    @property
    def code(self) -> Optional[int]:
        code = self.payload.get("code")
        return code if isinstance(code, int) and not isinstance(code, bool) else None

    @property
    def message(self) -> Optional[str]:
        message = self.payload.get("message")
        return message if isinstance(message, str) else None


class RequestInterrupted(Exception):
    """The provider went away before the call could start."""


class ExchangeError(Exception):
    """HTTP exchange failure that carries a response code and description."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ResponseValidationError(ExchangeError):
    pass


class ResponseDecodeError(ExchangeError):
    pass


__all__ = [
    "FeathersError",
    "RequestInterrupted",
    "ExchangeError",
    "ResponseValidationError",
    "ResponseDecodeError",
    "UNKNOWN_ERROR_MESSAGE",
    "PARSING_FAILURE_MESSAGE",
    "NO_VALID_RESPONSE_MESSAGE",
]
