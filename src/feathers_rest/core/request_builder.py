from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .endpoint import Endpoint, join_path
from .service import call_data, http_method

log = logging.getLogger("feathers_rest.core.request_builder")

JSON_CONTENT_TYPE = "application/json"


def encode_body(data: Optional[Dict[str, Any]]) -> Optional[bytes]:
    """JSON-encode a call body; an unencodable body is sent empty."""
    if data is None:
        return None
    try:
        return json.dumps(data, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        log.warning("Sending empty body, could not encode request data: %s", exc)
        return None


def build_request(endpoint: Endpoint) -> httpx.Request:
    """
    Build the HTTP request for a service call.

    An access token replaces any other headers for the call with the
    configured auth header; Content-Type is always JSON.
    """
    headers: Dict[str, str] = {}
    if endpoint.access_token is not None:
        headers = {endpoint.authentication_configuration.header: endpoint.access_token}
    headers["Content-Type"] = JSON_CONTENT_TYPE

    return httpx.Request(
        http_method(endpoint.method),
        endpoint.url,
        headers=headers,
        content=encode_body(call_data(endpoint.method)),
    )


def build_auth_request(
    base_url: str,
    path: str,
    method: str,
    credentials: Optional[Dict[str, Any]] = None,
) -> httpx.Request:
    """Authentication calls: credentials travel form-encoded, no auth header."""
    url = join_path(base_url, path)
    if credentials is None:
        return httpx.Request(method.upper(), url)
    return httpx.Request(method.upper(), url, data=credentials)


__all__ = ["JSON_CONTENT_TYPE", "build_request", "build_auth_request", "encode_body"]
