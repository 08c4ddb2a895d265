import json

import pytest
import respx
from feathers_rest.application import Feathers, InMemoryTokenStorage
from feathers_rest.core.endpoint import AuthenticationConfiguration
from feathers_rest.core.errors import FeathersError
from feathers_rest.core.service import Query
from feathers_rest.provider import RestProvider
from httpx import Response

BASE = "https://api.test"


class SetupSpy(RestProvider):
    def __init__(self, *args, **kwargs):
        self.setup_calls = []
        super().__init__(*args, **kwargs)

    def setup(self, app):
        self.setup_calls.append(app)


@pytest.mark.asyncio
async def test_setup_called_once_on_registration():
    provider = SetupSpy(BASE)
    app = Feathers(provider)
    assert provider.setup_calls == [app]
    await provider.aclose()


@pytest.mark.asyncio
async def test_service_is_cached_per_path():
    async with RestProvider(BASE) as provider:
        app = Feathers(provider)
        assert app.service("users") is app.service("/users/")


@pytest.mark.asyncio
@respx.mock
async def test_authenticate_stores_token_used_by_services():
    respx.post(f"{BASE}/authentication").mock(
        return_value=Response(201, json={"accessToken": "jwt-abc", "user": {"id": 1}})
    )
    route = respx.get(f"{BASE}/messages").mock(return_value=Response(200, json=[]))

    async with RestProvider(BASE) as provider:
        app = Feathers(provider)
        await app.authenticate({"strategy": "local", "email": "a@b.c", "password": "x"})
        assert app.access_token == "jwt-abc"

        await app.service("messages").find()

    assert route.calls[0].request.headers["Authorization"] == "jwt-abc"


@pytest.mark.asyncio
@respx.mock
async def test_custom_auth_configuration_header_and_path():
    respx.post(f"{BASE}/login").mock(
        return_value=Response(200, json={"accessToken": "tok"})
    )
    route = respx.get(f"{BASE}/messages/3").mock(
        return_value=Response(200, json={"id": 3})
    )
    config = AuthenticationConfiguration(header="X-Token", path="/login")

    async with RestProvider(BASE) as provider:
        app = Feathers(provider, authentication_configuration=config)
        await app.authenticate({"strategy": "local"})
        resp = await app.service("messages").get(3)

    assert resp.value == {"id": 3}
    assert route.calls[0].request.headers["X-Token"] == "tok"


@pytest.mark.asyncio
@respx.mock
async def test_logout_clears_token():
    respx.delete(f"{BASE}/authentication").mock(
        return_value=Response(200, json={"accessToken": "jwt-abc"})
    )
    storage = InMemoryTokenStorage()
    storage.set("feathers-jwt", "jwt-abc")

    async with RestProvider(BASE) as provider:
        app = Feathers(provider, storage=storage)
        assert app.access_token == "jwt-abc"
        await app.logout()

    assert app.access_token is None


@pytest.mark.asyncio
@respx.mock
async def test_authenticate_without_token_leaves_storage_empty():
    respx.post(f"{BASE}/authentication").mock(return_value=Response(200, json=[]))

    async with RestProvider(BASE) as provider:
        app = Feathers(provider)
        await app.authenticate({"strategy": "local"})

    assert app.access_token is None


@pytest.mark.asyncio
@respx.mock
async def test_service_crud_round():
    respx.post(f"{BASE}/todos").mock(return_value=Response(201, json={"id": 1}))
    put = respx.put(f"{BASE}/todos/1").mock(return_value=Response(200, json={"id": 1}))
    patch = respx.patch(f"{BASE}/todos/1").mock(
        return_value=Response(200, json={"id": 1, "done": True})
    )
    respx.delete(f"{BASE}/todos/1").mock(
        return_value=Response(404, json={"name": "NotFound", "code": 404})
    )
    find = respx.route(method="GET", path="/todos").mock(
        return_value=Response(
            200, json={"total": 0, "limit": 5, "skip": 0, "data": []}
        )
    )

    async with RestProvider(BASE) as provider:
        todos = Feathers(provider).service("todos")
        assert (await todos.create({"title": "a"})).value == {"id": 1}
        await todos.update(1, {"title": "b"})
        assert (await todos.patch(1, {"done": True})).value["done"] is True
        page = await todos.find(Query().eq("done", True).limit(5))
        with pytest.raises(FeathersError) as exc:
            await todos.remove(1)

    assert json.loads(put.calls[0].request.content) == {"title": "b"}
    assert patch.called
    assert find.calls[0].request.url.params["done"] == "true"
    assert page.pagination.limit == 5
    assert exc.value.code == 404
