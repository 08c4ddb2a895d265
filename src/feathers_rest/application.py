from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from .core.config import load_env_config
from .core.endpoint import AuthenticationConfiguration
from .core.response import Response
from .core.service import (
    Create,
    Find,
    Get,
    Patch,
    Query,
    Remove,
    ServiceMethod,
    Update,
)
from .provider import RestProvider, create_provider_from_env

log = logging.getLogger("feathers_rest.application")

Identifier = Union[str, int]


class InMemoryTokenStorage:
    """Keeps the access token for the lifetime of the process."""

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class Service:
    """One remote resource, e.g. ``app.service("users")``."""

    def __init__(self, app: "Feathers", path: str):
        self.app = app
        self.path = path

    async def request(self, method: ServiceMethod) -> Response:
        return await self.app.provider.request(
            method,
            self.path,
            access_token=self.app.access_token,
            authentication_configuration=self.app.authentication_configuration,
        )

    async def find(self, query: Optional[Query] = None) -> Response:
        return await self.request(Find(query=query))

    async def get(self, id: Identifier, query: Optional[Query] = None) -> Response:
        return await self.request(Get(id=id, query=query))

    async def create(
        self, data: Dict[str, Any], query: Optional[Query] = None
    ) -> Response:
        return await self.request(Create(data=data, query=query))

    async def update(
        self,
        id: Optional[Identifier],
        data: Dict[str, Any],
        query: Optional[Query] = None,
    ) -> Response:
        return await self.request(Update(id=id, data=data, query=query))

    async def patch(
        self,
        id: Optional[Identifier],
        data: Dict[str, Any],
        query: Optional[Query] = None,
    ) -> Response:
        return await self.request(Patch(id=id, data=data, query=query))

    async def remove(
        self, id: Optional[Identifier], query: Optional[Query] = None
    ) -> Response:
        return await self.request(Remove(id=id, query=query))


class Feathers:
    """
    Application context owning a provider and the authentication state.

    Services share the stored access token, which ``authenticate`` sets from
    the server's ``accessToken`` field and ``logout`` clears.
    """

    def __init__(
        self,
        provider: RestProvider,
        *,
        authentication_configuration: Optional[AuthenticationConfiguration] = None,
        storage: Optional[InMemoryTokenStorage] = None,
    ):
        self.provider = provider
        self.authentication_configuration = (
            authentication_configuration or AuthenticationConfiguration()
        )
        self.storage = storage or InMemoryTokenStorage()
        self._services: Dict[str, Service] = {}
        provider.setup(self)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "Feathers":
        """Provider and auth settings from FEATHERS_* environment variables."""
        config = load_env_config()
        auth = AuthenticationConfiguration(
            header=config.auth_header, path=config.auth_path
        )
        return cls(create_provider_from_env(**kwargs), authentication_configuration=auth)

    @property
    def access_token(self) -> Optional[str]:
        return self.storage.get(self.authentication_configuration.storage_key)

    def service(self, path: str) -> Service:
        path = path.strip("/")
        if path not in self._services:
            self._services[path] = Service(self, path)
        return self._services[path]

    async def authenticate(self, credentials: Dict[str, Any]) -> Response:
        response = await self.provider.authenticate(
            self.authentication_configuration.path, credentials
        )
        payload = response.value
        token = payload.get("accessToken") if isinstance(payload, dict) else None
        if isinstance(token, str) and token:
            self.storage.set(self.authentication_configuration.storage_key, token)
        else:
            log.warning("Authentication response carried no accessToken")
        return response

    async def logout(self) -> Response:
        response = await self.provider.logout(self.authentication_configuration.path)
        self.storage.delete(self.authentication_configuration.storage_key)
        return response


__all__ = ["Feathers", "Service", "InMemoryTokenStorage"]
