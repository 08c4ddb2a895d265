"""REST provider: runs service calls over HTTP and normalizes the results."""

from __future__ import annotations

import inspect
import logging
import time
import weakref
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Dict,
    Optional,
    Protocol,
    Tuple,
)

import httpx
from pydantic import ValidationError

from .core.config import DEFAULT_TIMEOUT_SECONDS, load_env_config
from .core.endpoint import AuthenticationConfiguration, Endpoint
from .core.errors import (
    NO_VALID_RESPONSE_MESSAGE,
    FeathersError,
    RequestInterrupted,
    ResponseDecodeError,
    ResponseValidationError,
)
from .core.observability import elapsed_ms, log_event
from .core.request_builder import build_auth_request, build_request
from .core.response import RawOutcome, Response, interpret_response
from .core.service import ServiceMethod

EventPayload = Dict[str, Any]


class RestProviderAnalyticsDelegate(Protocol):
    """
    Observer told about every service call before send and after receipt.

    The provider keeps only a weak reference, so the delegate must be an
    object that supports weakrefs (not a bound method or a ``__slots__``
    class without ``__weakref__``) and must be kept alive by its owner.
    """

    def will_send_request(self, request_id: str, request_url: Optional[str]) -> None:
        ...

    def did_receive_response(
        self, request_id: str, request_url: Optional[str]
    ) -> None:
        ...


class EmptyEventStream:
    """Event stream that completes immediately without emitting."""

    def __aiter__(self) -> AsyncIterator[EventPayload]:
        return self

    async def __anext__(self) -> EventPayload:
        raise StopAsyncIteration


def read_outcome(resp: httpx.Response) -> RawOutcome:
    """Validate the status and decode the JSON body of a finished exchange."""
    if not resp.is_success:
        return RawOutcome(
            error=ResponseValidationError(
                resp.status_code,
                f"Response status code was unacceptable: {resp.status_code}.",
            ),
            data=resp.content,
        )

    if not resp.content:
        return RawOutcome(data=resp.content)

    try:
        value = resp.json()
    except ValueError as exc:
        return RawOutcome(
            error=ResponseDecodeError(
                -1, f"Response could not be decoded as JSON: {exc}"
            ),
            data=resp.content,
        )
    return RawOutcome(value=value, data=resp.content)


class RestProvider:
    """
    Provider for Feathers services exposed over REST.

    - ``request``, ``authenticate`` and ``logout`` are lazy: they return an
      awaitable that holds the provider weakly and performs exactly one HTTP
      exchange when awaited
    - awaiting after the provider was closed or garbage-collected raises
      RequestInterrupted
    - failures are raised as FeathersError with a normalized payload
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").strip()
        if not base_url:
            raise ValueError("base_url must be provided.")

        self.base_url = base_url
        self.log = logger or logging.getLogger("feathers_rest.provider")
        self._analytics_ref: Optional[weakref.ReferenceType] = None
        self._closed = False

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "RestProvider":
        config = load_env_config()
        kwargs.setdefault("timeout_seconds", config.timeout_seconds)
        return cls(config.base_url, **kwargs)

    # --- Lifecycle --------------------------------------------------------- #

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        self._closed = True
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "RestProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def setup(self, app: Any) -> None:
        pass

    # --- Analytics --------------------------------------------------------- #

    @property
    def analytics_delegate(self) -> Optional[RestProviderAnalyticsDelegate]:
        if self._analytics_ref is None:
            return None
        return self._analytics_ref()

    @analytics_delegate.setter
    def analytics_delegate(
        self, delegate: Optional[RestProviderAnalyticsDelegate]
    ) -> None:
        if delegate is None:
            self._analytics_ref = None
            return
        if inspect.ismethod(delegate):
            raise TypeError("analytics_delegate must be an object, not a bound method")
        try:
            self._analytics_ref = weakref.ref(delegate)
        except TypeError as exc:
            raise TypeError(
                f"analytics_delegate must support weak references: {delegate!r}"
            ) from exc

    def _notify(self, hook: str, request_id: str, url: Optional[str]) -> None:
        delegate = self.analytics_delegate
        if delegate is None:
            return
        try:
            getattr(delegate, hook)(request_id, url)
        except Exception:
            self.log.exception("Analytics delegate %s failed for %s", hook, request_id)

    # --- Realtime (unsupported) -------------------------------------------- #

    @property
    def supports_realtime_events(self) -> bool:
        return False

    def on(self, event: str) -> EmptyEventStream:
        return EmptyEventStream()

    def once(self, event: str) -> EmptyEventStream:
        return EmptyEventStream()

    def off(self, event: str) -> None:
        pass

    # --- Calls ------------------------------------------------------------- #

    def request(
        self,
        call: ServiceMethod,
        path: str,
        *,
        access_token: Optional[str] = None,
        authentication_configuration: Optional[AuthenticationConfiguration] = None,
    ) -> Awaitable[Response]:
        endpoint = Endpoint(
            base_url=self.base_url,
            path=path,
            method=call,
            access_token=access_token,
            authentication_configuration=(
                authentication_configuration or AuthenticationConfiguration()
            ),
        )
        return _run_request(weakref.ref(self), endpoint)

    def authenticate(self, path: str, credentials: Dict[str, Any]) -> Awaitable[Response]:
        return _run_auth(weakref.ref(self), path, "POST", credentials)

    def logout(self, path: str) -> Awaitable[Response]:
        return _run_auth(weakref.ref(self), path, "DELETE", None)

    async def _perform(self, endpoint: Endpoint) -> Response:
        request_id = f"{endpoint.path}:{endpoint.method.name}"
        try:
            request = build_request(endpoint)
        except httpx.InvalidURL as exc:
            self._notify("will_send_request", request_id, None)
            self.log.warning("Could not build URL for %s: %s", request_id, exc)
            return self._interpret(RawOutcome(error=exc))

        self._notify("will_send_request", request_id, str(request.url))
        outcome, final_url = await self._exchange(request, request_id)
        self._notify("did_receive_response", request_id, final_url)
        return self._interpret(outcome)

    async def _perform_auth(
        self, path: str, method: str, credentials: Optional[Dict[str, Any]]
    ) -> Response:
        request_id = f"{path}:{method.lower()}"
        try:
            request = build_auth_request(self.base_url, path, method, credentials)
        except httpx.InvalidURL as exc:
            self.log.warning("Could not build URL for %s: %s", request_id, exc)
            return self._interpret(RawOutcome(error=exc))

        outcome, _ = await self._exchange(request, request_id)
        return self._interpret(outcome)

    async def _exchange(
        self, request: httpx.Request, request_id: str
    ) -> Tuple[RawOutcome, str]:
        start = time.perf_counter()
        try:
            resp = await self.http.send(request)
        except httpx.HTTPError as exc:
            log_event(
                "rest_call",
                call_id=request_id,
                method=request.method,
                url=str(request.url),
                status="exception",
                error_type=type(exc).__name__,
                duration_ms=elapsed_ms(start),
            )
            return RawOutcome(error=exc), str(request.url)

        final_url = str(resp.request.url)
        log_event(
            "rest_call",
            call_id=request_id,
            method=request.method,
            url=final_url,
            status=resp.status_code,
            duration_ms=elapsed_ms(start),
        )
        return read_outcome(resp), final_url

    def _interpret(self, outcome: RawOutcome) -> Response:
        try:
            return interpret_response(outcome)
        except ValidationError as exc:
            self.log.warning("Response did not match the normalized shape: %s", exc)
            raise FeathersError.from_reason(NO_VALID_RESPONSE_MESSAGE) from exc


def _resolve(provider_ref: "weakref.ReferenceType[RestProvider]") -> RestProvider:
    provider = provider_ref()
    if provider is None or provider.closed:
        raise RequestInterrupted("REST provider is no longer available.")
    return provider


async def _run_request(
    provider_ref: "weakref.ReferenceType[RestProvider]", endpoint: Endpoint
) -> Response:
    return await _resolve(provider_ref)._perform(endpoint)


async def _run_auth(
    provider_ref: "weakref.ReferenceType[RestProvider]",
    path: str,
    method: str,
    credentials: Optional[Dict[str, Any]],
) -> Response:
    return await _resolve(provider_ref)._perform_auth(path, method, credentials)


def create_provider_from_env(**kwargs: Any) -> RestProvider:
    """Create a RestProvider from environment variables."""
    config = load_env_config()
    if not config.base_url:
        raise ValueError("Missing FEATHERS_BASE_URL in environment.")
    kwargs.setdefault("timeout_seconds", config.timeout_seconds)
    return RestProvider(config.base_url, **kwargs)


__all__ = [
    "RestProvider",
    "RestProviderAnalyticsDelegate",
    "EmptyEventStream",
    "create_provider_from_env",
    "read_outcome",
]
