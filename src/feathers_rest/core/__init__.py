"""Transport-agnostic core for feathers-rest: call model, encoding, interpretation."""

from .config import RestConfig, load_env_config
from .endpoint import AuthenticationConfiguration, Endpoint, build_url, join_path
from .errors import (
    ExchangeError,
    FeathersError,
    RequestInterrupted,
    ResponseDecodeError,
    ResponseValidationError,
)
from .query import encode_query_items, stringify
from .request_builder import build_auth_request, build_request, encode_body
from .response import (
    ListData,
    ObjectData,
    Pagination,
    RawOutcome,
    Response,
    error_payload,
    interpret_response,
)
from .service import (
    Create,
    Find,
    Get,
    Patch,
    Query,
    Remove,
    ServiceMethod,
    SortOrder,
    SubqueryKind,
    Update,
    call_data,
    call_id,
    call_parameters,
    http_method,
    subquery_kind,
)

__all__ = [
    # Call model
    "ServiceMethod",
    "Find",
    "Get",
    "Create",
    "Update",
    "Patch",
    "Remove",
    "Query",
    "SortOrder",
    "SubqueryKind",
    "subquery_kind",
    "http_method",
    "call_id",
    "call_parameters",
    "call_data",
    # Encoding
    "encode_query_items",
    "stringify",
    "AuthenticationConfiguration",
    "Endpoint",
    "build_url",
    "join_path",
    "build_request",
    "build_auth_request",
    "encode_body",
    # Responses
    "Pagination",
    "ListData",
    "ObjectData",
    "Response",
    "RawOutcome",
    "error_payload",
    "interpret_response",
    # Exceptions
    "FeathersError",
    "RequestInterrupted",
    "ExchangeError",
    "ResponseValidationError",
    "ResponseDecodeError",
    # Config
    "RestConfig",
    "load_env_config",
]
