from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

import httpx

from .query import encode_query_items
from .service import ServiceMethod, call_id, call_parameters

log = logging.getLogger("feathers_rest.core.endpoint")


@dataclass(frozen=True)
class AuthenticationConfiguration:
    header: str = "Authorization"
    path: str = "/authentication"
    storage_key: str = "feathers-jwt"


@dataclass(frozen=True)
class Endpoint:
    """Everything needed to issue one service call."""

    base_url: str
    path: str
    method: ServiceMethod
    access_token: Optional[str] = None
    authentication_configuration: AuthenticationConfiguration = field(
        default_factory=AuthenticationConfiguration
    )

    @property
    def url(self) -> httpx.URL:
        return build_url(self.base_url, self.path, self.method)


def join_path(base_url: str, *segments: str) -> httpx.URL:
    """
    Append path components to the base URL path, one slash between them.

    Query and fragment of the base URL are kept as they are.
    """
    url = httpx.URL(str(base_url))
    path = url.raw_path.decode("ascii").split("?", 1)[0].rstrip("/")
    for segment in segments:
        segment = segment.strip("/")
        if segment:
            path = f"{path}/{segment}"
    return url.copy_with(path=path or "/")


def build_url(base_url: str, path: str, method: ServiceMethod) -> httpx.URL:
    """
    Absolute URL for a call: base + resource path (+ id) + encoded query.

    A query that cannot be applied leaves the URL without query items.
    """
    segments = [path]
    identifier = call_id(method)
    if identifier is not None:
        segments.append(quote(identifier, safe=""))
    url = join_path(base_url, *segments)

    parameters = call_parameters(method)
    if not parameters:
        return url

    try:
        return url.copy_merge_params(encode_query_items(parameters))
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        log.warning("Dropping query parameters for %s: %s", url, exc)
        return url


__all__ = ["AuthenticationConfiguration", "Endpoint", "build_url", "join_path"]
