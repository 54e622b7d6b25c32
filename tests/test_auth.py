# tests/test_auth.py
import asyncio

import httpx
import pytest
from fastapi import HTTPException

from catalog.auth import Unauthenticated, WhoAmIAuthenticator, require_admin
from catalog.database import UserStore
from conftest import FakeAuthenticator, add_product

WHOAMI = "http://whoami.test/whoami"


def _whoami(handler):
    return WhoAmIAuthenticator(WHOAMI, transport=httpx.MockTransport(handler))


def test_whoami_returns_identity_and_forwards_header():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"token": "tok-1"})

    identity = asyncio.run(_whoami(handler).verify("Bearer abc"))
    assert identity.token == "tok-1"
    assert seen[0].method == "GET"
    assert str(seen[0].url) == WHOAMI
    assert seen[0].headers["Authorization"] == "Bearer abc"


@pytest.mark.parametrize("response", [
    httpx.Response(401),
    httpx.Response(403, text="forbidden"),
    httpx.Response(500),
    httpx.Response(200, json={}),
    httpx.Response(200, json=["tok"]),
    httpx.Response(200, text="not json"),
])
def test_whoami_non_success_is_unauthenticated(response):
    with pytest.raises(Unauthenticated):
        asyncio.run(_whoami(lambda request: response).verify("Bearer abc"))


def test_whoami_missing_header_skips_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"token": "tok-1"})

    with pytest.raises(Unauthenticated):
        asyncio.run(_whoami(handler).verify(None))
    assert calls == []


def test_whoami_transport_error_propagates():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        asyncio.run(_whoami(handler).verify("Bearer abc"))


def test_require_admin_outcomes():
    users = UserStore({"root": True, "guest": False})
    auth = FakeAuthenticator({"root", "guest", "stranger"})

    user = asyncio.run(require_admin(auth, users, "Bearer root", "agregar"))
    assert user.is_admin()

    with pytest.raises(HTTPException) as exc:
        asyncio.run(require_admin(auth, users, "Bearer guest", "eliminar"))
    assert exc.value.status_code == 403
    assert exc.value.detail == "No tiene permisos para eliminar productos"

    # identity exists but no user record
    with pytest.raises(HTTPException) as exc:
        asyncio.run(require_admin(auth, users, "Bearer stranger", "agregar"))
    assert exc.value.status_code == 401


def test_add_product_through_whoami(make_client):
    def handler(request):
        if request.headers.get("Authorization") == "Bearer good":
            return httpx.Response(200, json={"token": "admin-token"})
        return httpx.Response(401)

    client = make_client(authenticator=_whoami(handler))
    assert add_product(client, headers={"Authorization": "Bearer good"}).status_code == 201
    assert add_product(client, headers={"Authorization": "Bearer bad"}).status_code == 401


def test_whoami_down_is_500(make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(authenticator=_whoami(handler))
    resp = add_product(client)
    assert resp.status_code == 500
    assert resp.text == "Error interno del servidor"
    assert len(client.products) == 0
