"""feathers_rest package exports."""

from .application import Feathers, InMemoryTokenStorage, Service
from .core import (
    AuthenticationConfiguration,
    Create,
    Endpoint,
    FeathersError,
    Find,
    Get,
    ListData,
    ObjectData,
    Pagination,
    Patch,
    Query,
    Remove,
    RequestInterrupted,
    Response,
    SortOrder,
    Update,
)
from .core.logging import setup_logging
from .provider import (
    EmptyEventStream,
    RestProvider,
    RestProviderAnalyticsDelegate,
    create_provider_from_env,
)

__all__ = [
    # Provider
    "RestProvider",
    "RestProviderAnalyticsDelegate",
    "EmptyEventStream",
    "create_provider_from_env",
    # Application
    "Feathers",
    "Service",
    "InMemoryTokenStorage",
    "AuthenticationConfiguration",
    "Endpoint",
    # Call model
    "Find",
    "Get",
    "Create",
    "Update",
    "Patch",
    "Remove",
    "Query",
    "SortOrder",
    # Responses
    "Response",
    "Pagination",
    "ListData",
    "ObjectData",
    # Exceptions
    "FeathersError",
    "RequestInterrupted",
    # Logging
    "setup_logging",
]
