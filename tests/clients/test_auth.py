from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from company_intel.clients import auth as auth_module
from company_intel.clients.auth import TokenProvider, build_scope
from company_intel.clients.errors import AuthError
from tests.helpers.metrics_stub import StubMetrics


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _provider(handler, clock=None, margin: float = 60.0) -> TokenProvider:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TokenProvider(
        client_id="client-id",
        client_secret="client-secret",
        tenant_id="tenant-42",
        resource_url="https://search.example.test",
        endpoint_template="https://login.example.test/{tenant_id}/token",
        expiry_margin_seconds=margin,
        http_client=http_client,
        clock=clock or _Clock(),
    )


def test_build_scope_appends_default_suffix():
    assert build_scope("https://search.example.test") == "https://search.example.test/.default"
    assert build_scope("https://search.example.test/") == "https://search.example.test/.default"
    assert build_scope("api://abc/.default") == "api://abc/.default"


@pytest.mark.asyncio
async def test_token_is_cached_until_refresh_needed(monkeypatch):
    stub = StubMetrics()
    monkeypatch.setattr(auth_module, "metrics", stub)
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"access_token": "tok-1", "expires_in": 3600})

    provider = _provider(handler)

    assert provider.token_status == "none"
    assert await provider.get_access_token() == "tok-1"
    assert await provider.get_access_token() == "tok-1"

    assert len(requests) == 1
    assert str(requests[0].url) == "https://login.example.test/tenant-42/token"
    form = parse_qs(requests[0].content.decode())
    assert form["grant_type"] == ["client_credentials"]
    assert form["scope"] == ["https://search.example.test/.default"]
    assert form["client_id"] == ["client-id"]
    assert stub.counted("auth.token_refresh") == 1
    assert stub.counted("auth.token_cache_hit") == 1
    assert provider.token_status == "valid"


@pytest.mark.asyncio
async def test_token_refreshes_once_safety_margin_is_reached():
    clock = _Clock(1_000.0)
    issued = iter(["tok-1", "tok-2"])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": next(issued), "expires_in": 120})

    provider = _provider(handler, clock=clock, margin=60)

    assert await provider.get_access_token() == "tok-1"
    clock.now = 1_059.0
    assert await provider.get_access_token() == "tok-1"
    clock.now = 1_060.0
    assert provider.token_status == "expired"
    assert await provider.get_access_token() == "tok-2"


@pytest.mark.asyncio
async def test_rejected_credentials_raise_auth_error_with_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="invalid_client")

    provider = _provider(handler)

    with pytest.raises(AuthError) as excinfo:
        await provider.get_access_token()

    assert excinfo.value.code == "SEARCH_AUTH_FAILED"
    assert excinfo.value.status_code == 401
    assert "401" in str(excinfo.value)
    assert "invalid_client" in str(excinfo.value)
    assert provider.token_status == "none"


@pytest.mark.asyncio
async def test_response_without_access_token_is_an_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "Bearer"})

    provider = _provider(handler)

    with pytest.raises(AuthError):
        await provider.get_access_token()


@pytest.mark.asyncio
async def test_transport_failure_is_an_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _provider(handler)

    with pytest.raises(AuthError) as excinfo:
        await provider.get_access_token()

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
