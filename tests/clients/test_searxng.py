from __future__ import annotations

import httpx
import pytest

from company_intel.clients import searxng as searxng_module
from company_intel.clients.errors import BackendError, SearchTimeoutError
from company_intel.clients.searxng import format_search_results, repair_truncated_json
from company_intel.models.search import SearchOptions
from tests.helpers.metrics_stub import StubMetrics
from tests.helpers.search_backend import (
    FakeBackend,
    build_search_client,
    result,
    results_payload,
    static_results,
)


def test_repair_closes_truncated_results_payload():
    truncated = '{"results": [{"title": "A", "url": "https://a.example"}, {"title": "B"'

    repaired = repair_truncated_json(truncated)

    assert repaired == {"results": [{"title": "A", "url": "https://a.example"}, {"title": "B"}]}


def test_repair_skips_complete_or_unrelated_payloads():
    assert repair_truncated_json('{"results": []}') is None
    assert repair_truncated_json('{"answers": [1, 2') is None
    assert repair_truncated_json('{"results": [{"title": "cut mid str') is None


def test_format_search_results_applies_item_defaults():
    response = format_search_results(
        {"results": [{"url": "https://x.example", "snippet": "From snippet", "publishedDate": "2024-01-02"}]},
        "query",
    )

    item = response.results[0]
    assert response.total_results == 1
    assert item.title == "Sans titre"
    assert item.content == "From snippet"
    assert item.engine == "unknown"
    assert item.score == 0.0
    assert item.published_date == "2024-01-02"


@pytest.mark.asyncio
async def test_search_applies_focus_and_serves_repeat_from_cache(monkeypatch):
    stub = StubMetrics()
    monkeypatch.setattr(searxng_module, "metrics", stub)
    backend = FakeBackend(static_results(result("Acme results", "Acme revenue grew")))
    client = build_search_client(backend)

    first = await client.search("Acme revenue")
    second = await client.search("Acme revenue")

    assert second is first
    assert len(backend.search_requests) == 1
    assert len(backend.token_requests) == 1
    request = backend.search_requests[0]
    assert request.headers["Authorization"] == "Bearer tok-123"
    assert request.url.path == "/search"
    assert request.url.params["format"] == "json"
    assert request.url.params["engines"] == "google,duckduckgo,yahoo"
    assert request.url.params["q"] == "Acme revenue finance financial"
    assert request.url.params["lang"] == "fr"
    assert first.focus_mode == "financialSearch"
    assert first.original_query == "Acme revenue"
    assert first.optimized_query == "Acme revenue finance financial"

    stats = client.stats.snapshot()
    assert stats["total_requests"] == 2
    assert stats["successful_requests"] == 1
    assert stats["cached_requests"] == 1
    assert stub.counted("search.cache_hit") == 1
    assert stub.counted("search.success") == 1


@pytest.mark.asyncio
async def test_explicit_focus_mode_overrides_detection():
    backend = FakeBackend(static_results())
    client = build_search_client(backend)

    response = await client.search("Acme revenue", SearchOptions(language="en"), "marketAnalysis")

    params = backend.search_requests[0].url.params
    assert response.focus_mode == "marketAnalysis"
    assert params["engines"] == "google,yahoo"
    assert params["q"] == "Acme revenue market marché"
    assert params["lang"] == "en"


@pytest.mark.asyncio
async def test_unconfigured_client_reports_without_calling_backend():
    backend = FakeBackend(static_results())
    client = build_search_client(backend, missing_settings=["SEARXNG_URL", "CLIENT_ID"])

    response = await client.search("Acme")

    assert response.configured is False
    assert response.success is False
    assert "SEARXNG_URL" in (response.error or "")
    assert backend.search_requests == []
    assert backend.token_requests == []
    assert client.stats.snapshot()["error_count"] == 1


@pytest.mark.asyncio
async def test_timeout_maps_to_search_timeout_error(monkeypatch):
    stub = StubMetrics()
    monkeypatch.setattr(searxng_module, "metrics", stub)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = build_search_client(FakeBackend(handler))

    with pytest.raises(SearchTimeoutError):
        await client.search("Acme")

    assert client.stats.snapshot()["error_count"] == 1
    errors = [call for call in stub.increment_calls if call["metric"] == "search.errors"]
    assert errors[0]["tags"] == {"code": "SEARCH_TIMEOUT"}


@pytest.mark.asyncio
async def test_error_status_maps_to_backend_error_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream exploded")

    client = build_search_client(FakeBackend(handler))

    with pytest.raises(BackendError) as excinfo:
        await client.search("Acme")

    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "upstream exploded"


@pytest.mark.asyncio
async def test_empty_body_is_a_backend_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="   ")

    client = build_search_client(FakeBackend(handler))

    with pytest.raises(BackendError):
        await client.search("Acme")


@pytest.mark.asyncio
async def test_truncated_body_is_repaired():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, text='{"results": [{"title": "Acme", "url": "https://acme.example", "content": "ok"},'
        )

    client = build_search_client(FakeBackend(handler))

    response = await client.search("Acme")

    assert [item.title for item in response.results] == ["Acme"]


@pytest.mark.asyncio
async def test_company_info_tolerates_partial_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        if "financière" in request.url.params["q"]:
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, json=results_payload(result("Acme SA", "Acme SA entreprise")))

    backend = FakeBackend(handler)
    client = build_search_client(backend)

    bundle = await client.search_company_info("Acme SA")

    assert bundle.total_queries == 3
    assert bundle.successful_queries == 2
    assert len(bundle.all_results) == 2
    assert bundle.detected_geography is not None
    assert bundle.detected_geography.country == "France"
    assert bundle.search_results[0].query == '"Acme SA" entreprise Europe'
    assert {request.url.params["lang"] for request in backend.search_requests} == {"fr"}


@pytest.mark.asyncio
async def test_company_info_raises_when_every_query_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="down")

    client = build_search_client(FakeBackend(handler))

    with pytest.raises(BackendError):
        await client.search_company_info("Acme SA")


@pytest.mark.asyncio
async def test_company_info_without_configuration_returns_flagged_bundle():
    client = build_search_client(FakeBackend(static_results()), missing_settings=["TENANT_ID"])

    bundle = await client.search_company_info("Apple Inc")

    assert bundle.configured is False
    assert bundle.success is False
    assert bundle.detected_geography.country == "United States"


@pytest.mark.asyncio
async def test_connection_check_reports_backend_health():
    healthy = build_search_client(FakeBackend(static_results()))
    broken = build_search_client(FakeBackend(lambda request: httpx.Response(500, text="no")))

    assert await healthy.test_connection() is True
    assert await broken.test_connection() is False
