from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import (
    PARSING_FAILURE_MESSAGE,
    UNKNOWN_ERROR_MESSAGE,
    ExchangeError,
    FeathersError,
)

PAGINATION_KEYS = ("skip", "limit", "total", "data")


class Pagination(BaseModel):
    total: int = Field(ge=0)
    limit: int = Field(ge=0)
    skip: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class ListData(BaseModel):
    kind: Literal["list"] = "list"
    items: List[Any]

    model_config = ConfigDict(frozen=True)


class ObjectData(BaseModel):
    kind: Literal["object"] = "object"
    value: Any

    model_config = ConfigDict(frozen=True)


class Response(BaseModel):
    """Normalized result of a successful service call."""

    pagination: Optional[Pagination] = None
    data: Union[ListData, ObjectData] = Field(discriminator="kind")

    model_config = ConfigDict(frozen=True)

    @property
    def is_list(self) -> bool:
        return isinstance(self.data, ListData)

    @property
    def value(self) -> Any:
        """The list items or the object, whichever the server returned."""
        if isinstance(self.data, ListData):
            return self.data.items
        return self.data.value


@dataclass(frozen=True)
class RawOutcome:
    """What came back from one HTTP exchange, before interpretation."""

    value: Any = None
    error: Optional[BaseException] = None
    data: Optional[bytes] = None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _pagination(payload: Dict[str, Any]) -> Optional[Pagination]:
    if not all(key in payload for key in PAGINATION_KEYS):
        return None
    skip, limit, total = payload["skip"], payload["limit"], payload["total"]
    if not (_is_int(skip) and _is_int(limit) and _is_int(total)):
        return None
    if min(skip, limit, total) < 0 or not isinstance(payload["data"], list):
        return None
    return Pagination(total=total, limit=limit, skip=skip)


def error_payload(error: BaseException, data: Optional[bytes]) -> Dict[str, Any]:
    """Server error body if it is a JSON object, else a synthesized payload."""
    if data:
        try:
            parsed = json.loads(data)
        except (ValueError, UnicodeDecodeError):
            parsed = None
        if isinstance(parsed, dict) and parsed:
            return parsed

    if isinstance(error, ExchangeError):
        return {"code": error.code, "message": error.message}
    return {"message": UNKNOWN_ERROR_MESSAGE}


def interpret_response(outcome: RawOutcome) -> Response:
    """
    Classify an exchange outcome.

    Priority: error, list, paginated object, plain object. Anything else
    raises a parsing failure.
    """
    if outcome.error is not None:
        raise FeathersError(error_payload(outcome.error, outcome.data))

    value = outcome.value
    if isinstance(value, list):
        return Response(data=ListData(items=value))

    if isinstance(value, dict):
        pagination = _pagination(value)
        if pagination is not None:
            return Response(pagination=pagination, data=ListData(items=value["data"]))
        return Response(data=ObjectData(value=value))

    raise FeathersError.from_reason(PARSING_FAILURE_MESSAGE)


__all__ = [
    "Pagination",
    "ListData",
    "ObjectData",
    "Response",
    "RawOutcome",
    "error_payload",
    "interpret_response",
]
