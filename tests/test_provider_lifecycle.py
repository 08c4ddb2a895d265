import asyncio
import gc

import httpx
import pytest
from feathers_rest.core.errors import FeathersError, RequestInterrupted
from feathers_rest.core.service import Find, Get
from feathers_rest.provider import RestProvider

BASE = "https://api.test"


class RecordingDelegate:
    def __init__(self):
        self.events = []
        self.sent = asyncio.Event()

    def will_send_request(self, request_id, request_url):
        self.events.append(("will_send", request_id))
        self.sent.set()

    def did_receive_response(self, request_id, request_url):
        self.events.append(("did_receive", request_id))


def _provider_with(handler) -> RestProvider:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestProvider(BASE, http=http)


@pytest.mark.asyncio
async def test_request_after_provider_collected_is_interrupted():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    provider = _provider_with(handler)
    pending = provider.request(Find(), "messages")

    del provider
    gc.collect()

    with pytest.raises(RequestInterrupted):
        await pending
    assert calls == []


@pytest.mark.asyncio
async def test_request_after_close_is_interrupted():
    provider = RestProvider(BASE)
    await provider.aclose()
    assert provider.closed

    with pytest.raises(RequestInterrupted):
        await provider.request(Get(id="1"), "messages")
    with pytest.raises(RequestInterrupted):
        await provider.authenticate("authentication", {"strategy": "local"})
    with pytest.raises(RequestInterrupted):
        await provider.logout("authentication")


def test_interruption_is_not_a_feathers_error():
    assert not issubclass(RequestInterrupted, FeathersError)


@pytest.mark.asyncio
async def test_request_is_lazy_until_awaited():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"id": 1})

    provider = _provider_with(handler)
    pending = provider.request(Get(id="1"), "messages")
    assert calls == []

    resp = await pending
    assert resp.value == {"id": 1}
    assert len(calls) == 1
    await provider.http.aclose()


@pytest.mark.asyncio
async def test_cancelled_call_fires_no_did_receive():
    release = asyncio.Event()

    async def handler(request):
        await release.wait()
        return httpx.Response(200, json=[])

    provider = _provider_with(handler)
    delegate = RecordingDelegate()
    provider.analytics_delegate = delegate

    task = asyncio.create_task(provider.request(Find(), "messages"))
    await asyncio.wait_for(delegate.sent.wait(), timeout=1)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    release.set()
    await asyncio.sleep(0)

    assert delegate.events == [("will_send", "messages:find")]
    await provider.http.aclose()


@pytest.mark.asyncio
async def test_concurrent_calls_are_independent():
    def handler(request):
        if request.url.path.endswith("/bad"):
            return httpx.Response(400, json={"message": "bad", "code": 400})
        return httpx.Response(200, json={"path": request.url.path})

    provider = _provider_with(handler)
    results = await asyncio.gather(
        provider.request(Get(id="a"), "items"),
        provider.request(Get(id="bad"), "items"),
        provider.request(Get(id="c"), "items"),
        return_exceptions=True,
    )

    assert results[0].value == {"path": "/items/a"}
    assert isinstance(results[1], FeathersError)
    assert results[1].payload == {"message": "bad", "code": 400}
    assert results[2].value == {"path": "/items/c"}
    await provider.http.aclose()


@pytest.mark.asyncio
async def test_injected_client_is_not_closed_by_provider():
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    )
    async with RestProvider(BASE, http=http):
        pass
    assert not http.is_closed
    await http.aclose()
