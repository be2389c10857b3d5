from __future__ import annotations

import httpx

from company_intel.api.dependencies import get_search_client
from company_intel.main import app
from tests.helpers.search_backend import (
    FakeBackend,
    build_search_client,
    result,
    static_results,
)

ACME_RESULTS = (
    result(
        "Acme Consulting SA - French consulting group",
        "Acme Consulting SA is a French IT consulting company headquartered in Paris with "
        "1,200 employees and a chiffre d'affaires de 150 millions d'euros. Founded in 1998.",
        "https://www.acme-consulting.com/about",
    ),
    result(
        "Acme Consulting SA annual report",
        "Acme Consulting SA advises industrial clients across Europe.",
        "https://news.example/acme",
    ),
)


def _use_backend(backend: FakeBackend, **kwargs):
    search_client = build_search_client(backend, **kwargs)
    app.dependency_overrides[get_search_client] = lambda: search_client
    return search_client


def test_search_company_returns_profile(client):
    backend = FakeBackend(static_results(*ACME_RESULTS))
    _use_backend(backend)

    response = client.post("/api/companies/search", json={"query": "Acme Consulting SA"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["name"] == "Acme Consulting SA"
    assert data["employees"] == 1200
    assert data["revenue"] == "€150M"
    assert data["country"] == "France"
    assert data["headquarters"] == "Paris"
    assert data["founding_year"] == 1998
    assert data["confidence"] == 0.8
    assert body["data_quality"]["search_results_count"] == 6
    assert body["metadata"]["total_web_queries"] == 3
    assert body["metadata"]["search_engine"] == "SearXNG"
    assert body["metadata"]["geography_detected"]["country"] == "France"
    assert len(backend.search_requests) == 3


def test_suspicious_query_is_rejected_before_searching(client):
    backend = FakeBackend(static_results(*ACME_RESULTS))
    _use_backend(backend)

    response = client.post("/api/companies/search", json={"query": "Test Company"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "INVALID_INPUT"
    assert backend.search_requests == []
    assert backend.token_requests == []


def test_query_length_is_validated(client):
    _use_backend(FakeBackend(static_results()))

    response = client.post("/api/companies/search", json={"query": "A"})

    assert response.status_code == 422


def test_no_results_returns_404_with_suggestions(client):
    _use_backend(FakeBackend(static_results()))

    response = client.post("/api/companies/search", json={"query": "Acme Consulting SA"})

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error"]["code"] == "NOT_FOUND"
    assert detail["suggestions"]


def test_unconfigured_backend_returns_503(client):
    _use_backend(FakeBackend(static_results()), missing_settings=["SEARXNG_URL"])

    response = client.post("/api/companies/search", json={"query": "Acme Consulting SA"})

    assert response.status_code == 503
    assert response.json()["detail"]["error"]["code"] == "SEARCH_NOT_CONFIGURED"


def test_backend_failure_returns_502(client):
    _use_backend(FakeBackend(lambda request: httpx.Response(500, text="boom")))

    response = client.post("/api/companies/search", json={"query": "Acme Consulting SA"})

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "SEARCH_BACKEND_ERROR"


def test_backend_timeout_returns_504(client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    _use_backend(FakeBackend(handler))

    response = client.post("/api/companies/search", json={"query": "Acme Consulting SA"})

    assert response.status_code == 504


def test_auth_failure_returns_502(client):
    backend = FakeBackend(
        static_results(*ACME_RESULTS),
        token=lambda request: httpx.Response(401, text="invalid_client"),
    )
    _use_backend(backend)

    response = client.post("/api/companies/search", json={"query": "Acme Consulting SA"})

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "SEARCH_AUTH_FAILED"


def test_details_requires_symbol_or_name(client):
    _use_backend(FakeBackend(static_results(*ACME_RESULTS)))

    response = client.post("/api/companies/details", json={})

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "MISSING_IDENTIFIER"


def test_details_by_symbol_searches_in_english(client):
    backend = FakeBackend(static_results(*ACME_RESULTS))
    _use_backend(backend)

    response = client.post("/api/companies/details", json={"symbol": "acm.pa"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["symbol"] == "ACM.PA"
    assert data["source"] == "web_search_detailed"
    assert data["market_data"]["currency"] == "EUR"
    assert {request.url.params["lang"] for request in backend.search_requests} == {"en"}


def test_analyze_company_returns_deep_profile(client):
    _use_backend(FakeBackend(static_results(*ACME_RESULTS)))

    response = client.post("/api/companies/analyze", json={"company_name": "Acme Consulting"})

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["source"] == "deep_web_analysis"
    assert body["data"]["employees"] == 1200
    assert body["relevance_score"] >= 20
    assert body["data_quality"]["search_queries"] == 7
    assert body["data_quality"]["is_generated"] is False


def test_analyze_company_falls_back_without_relevant_results(client):
    _use_backend(FakeBackend(static_results()))

    response = client.post("/api/companies/analyze", json={"company_name": "Acme Consulting"})

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["source"] == "fallback"
    assert body["data"]["confidence"] == 0.1
    assert body["data_quality"]["is_generated"] is True


def test_repeat_analysis_reuses_profile_cache_of_injected_client(client):
    backend = FakeBackend(static_results(*ACME_RESULTS))
    _use_backend(backend)

    first = client.post("/api/companies/analyze", json={"company_name": "Acme Consulting"})
    second = client.post("/api/companies/analyze", json={"company_name": "acme consulting"})

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["data"]["employees"] == 1200
    assert len(backend.search_requests) == 7
