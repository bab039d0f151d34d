import json
from datetime import timedelta

import httpx
import pytest

from core.api.auth import (
    REFRESH_PATH,
    TOKEN_PATH,
    AuthContext,
    obtain_token,
    refresh_access_token,
)
from core.api.errors import AuthenticationError

BASE_URL = "http://api.test"


def _http_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_obtain_token_success(now):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"access": "acc-1", "refresh": "ref-1"})

    with _http_client(handler) as http:
        auth = obtain_token("admin", "secret", base_url=BASE_URL, http_client=http, lifetime_minutes=5)

    assert seen["path"] == TOKEN_PATH
    assert seen["body"] == {"username": "admin", "password": "secret"}
    assert auth.access_token == "acc-1"
    assert auth.refresh_token == "ref-1"
    assert not auth.is_expired()


def test_obtain_token_rejected_uses_server_detail():
    def handler(request):
        return httpx.Response(401, json={"detail": "No active account found with the given credentials"})

    with _http_client(handler) as http:
        with pytest.raises(AuthenticationError, match="No active account"):
            obtain_token("admin", "wrong", base_url=BASE_URL, http_client=http)


def test_obtain_token_rejected_without_detail():
    def handler(request):
        return httpx.Response(400, text="bad request")

    with _http_client(handler) as http:
        with pytest.raises(AuthenticationError, match="Incorrect username or password"):
            obtain_token("admin", "wrong", base_url=BASE_URL, http_client=http)


def test_obtain_token_unreachable_server():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with _http_client(handler) as http:
        with pytest.raises(AuthenticationError, match="Could not reach the server"):
            obtain_token("admin", "secret", base_url=BASE_URL, http_client=http)


def test_refresh_keeps_refresh_token(now):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"access": "acc-2"})

    old = AuthContext(access_token="acc-1", expires_at=now, refresh_token="ref-1")
    with _http_client(handler) as http:
        auth = refresh_access_token(old, base_url=BASE_URL, http_client=http)

    assert seen["path"] == REFRESH_PATH
    assert seen["body"] == {"refresh": "ref-1"}
    assert auth.access_token == "acc-2"
    assert auth.refresh_token == "ref-1"


def test_refresh_without_refresh_token(now):
    auth = AuthContext(access_token="acc-1", expires_at=now)
    with pytest.raises(AuthenticationError, match="Session expired"):
        refresh_access_token(auth, base_url=BASE_URL)


def test_is_expired_with_leeway(now):
    auth = AuthContext(access_token="acc", expires_at=now + timedelta(seconds=10))
    assert auth.is_expired(now) is False
    assert auth.is_expired(now, leeway_seconds=15) is True
    assert auth.is_expired(now + timedelta(seconds=10)) is True


def test_from_token_response(now):
    auth = AuthContext.from_token_response({"access": "acc"}, lifetime_minutes=5, now=now)
    assert auth.expires_at == now + timedelta(minutes=5)
    assert auth.refresh_token is None
    assert auth.headers() == {"Authorization": "Bearer acc"}

    with pytest.raises(AuthenticationError):
        AuthContext.from_token_response({}, lifetime_minutes=5, now=now)
