from __future__ import annotations

from company_intel.api.dependencies import get_search_client
from company_intel.main import app
from tests.helpers.search_backend import FakeBackend, build_search_client, result, static_results

ACME = result(
    "Acme Consulting SA - French consulting group",
    "Acme Consulting SA is a French IT consulting company headquartered in Paris with "
    "1,200 employees and a chiffre d'affaires de 150 millions d'euros. Founded in 1998.",
    "https://www.acme-consulting.com/about",
)
GLOBEX = result(
    "Globex Consulting SA, French consulting competitor",
    "Globex Consulting SA is a French consulting firm based in Paris.",
    "https://globex.example/about",
)


def _use_backend(backend: FakeBackend) -> None:
    search_client = build_search_client(backend)
    app.dependency_overrides[get_search_client] = lambda: search_client


def test_find_comparables_ranks_similar_companies(client):
    backend = FakeBackend(static_results(ACME, GLOBEX))
    _use_backend(backend)

    response = client.post("/api/comparables", json={"company_name": "Acme Consulting SA"})

    assert response.status_code == 200
    body = response.json()
    assert body["reference_company"]["name"] == "Acme Consulting SA"
    assert body["reference_company"]["is_main_company"] is True
    assert body["total_found"] == 1
    globex = body["comparables"][0]
    assert globex["name"] == "Globex Consulting SA"
    assert globex["similarity_score"] == 76
    assert "Same sector: Consulting" in globex["match_reasons"]
    assert body["search_criteria"]["sector"] == "Consulting"
    assert body["search_criteria"]["size_category"] == "large"
    assert body["search_criteria"]["failed_queries"] == 0
    assert body["breakdown"]["same_country"] == 1
    assert body["metadata"]["total_web_queries"] == 8
    assert len(backend.search_requests) == 8


def test_find_comparables_returns_404_when_nothing_is_similar_enough(client):
    _use_backend(FakeBackend(static_results(ACME, GLOBEX)))

    response = client.post(
        "/api/comparables",
        json={"company_name": "Acme Consulting SA", "min_similarity": 100},
    )

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error"]["code"] == "NOT_FOUND"
    assert "Lower the minimum similarity threshold" in detail["suggestions"]


def test_find_comparables_validates_bounds(client):
    _use_backend(FakeBackend(static_results(ACME, GLOBEX)))

    response = client.post(
        "/api/comparables",
        json={"company_name": "Acme Consulting SA", "max_results": 0},
    )

    assert response.status_code == 422
