from __future__ import annotations

import pytest

from company_intel.models.company import CompanyProfile
from company_intel.models.search import SearchResultItem
from company_intel.services import analysis as analysis_module
from company_intel.services.analysis import (
    RESEARCH_QUERIES,
    CompanyAnalyzer,
    company_relevance_score,
    is_relevant,
)
from company_intel.services.extraction.profile import ProfileExtractor
from tests.helpers.metrics_stub import StubMetrics
from tests.helpers.stub_gateway import StubGateway

RELEVANT = [
    SearchResultItem(
        title=f"Acme Consulting profile {index}",
        url=f"https://acme.example/{index}",
        content="Acme Consulting is a French consulting firm with 1,200 employees.",
    )
    for index in range(3)
]
NOISE = SearchResultItem(title="Unrelated", url="https://noise.example", content="Weather today")


def _analyzer(gateway: StubGateway) -> CompanyAnalyzer:
    return CompanyAnalyzer(
        gateway,
        extractor=ProfileExtractor(default_sector="Technology", default_region="Global"),
        cache_ttl_seconds=60,
    )


def test_is_relevant_matches_normalized_name():
    assert is_relevant(RELEVANT[0], "  ACME   consulting ")
    assert not is_relevant(NOISE, "Acme Consulting")


@pytest.mark.asyncio
async def test_analyze_runs_all_research_queries_and_filters_results():
    gateway = StubGateway(RELEVANT + [NOISE])

    analysis = await _analyzer(gateway).analyze("Acme Consulting")

    assert len(gateway.queries) == len(RESEARCH_QUERIES) == 7
    assert analysis.queries == 7
    assert analysis.relevant_results == 3
    assert analysis.profile.source == "deep_web_analysis"
    assert analysis.profile.confidence == 0.3
    assert analysis.profile.employees == 1_200
    assert analysis.profile.country == "France"


@pytest.mark.asyncio
async def test_repeat_analysis_is_served_from_cache(monkeypatch):
    stub = StubMetrics()
    monkeypatch.setattr(analysis_module, "metrics", stub)
    gateway = StubGateway(RELEVANT)
    analyzer = _analyzer(gateway)

    first = await analyzer.analyze("Acme Consulting")
    second = await analyzer.analyze("acme consulting")

    assert second is first
    assert len(gateway.queries) == 7
    assert stub.counted("analysis.profile_cache_hit") == 1


@pytest.mark.asyncio
async def test_fallback_profile_is_not_cached():
    gateway = StubGateway([NOISE])
    analyzer = _analyzer(gateway)

    profile = await analyzer.analyze_company("Acme Consulting")
    await analyzer.analyze_company("Acme Consulting")

    assert profile.source == "fallback"
    assert profile.confidence == 0.1
    assert len(gateway.queries) == 14


@pytest.mark.asyncio
async def test_failed_research_queries_are_skipped():
    gateway = StubGateway(RELEVANT, fail_on="competitors")

    analysis = await _analyzer(gateway).analyze("Acme Consulting")

    assert analysis.profile.source == "deep_web_analysis"
    assert analysis.relevant_results == 3


def test_relevance_score_rewards_populated_fields():
    rich = CompanyProfile(
        name="Acme",
        source="deep_web_analysis",
        confidence=0.8,
        revenue="€10M",
        employees=100,
        description="desc",
        competitors_mentioned=["Accenture"],
    )

    assert company_relevance_score(rich) == 40
    assert company_relevance_score(CompanyProfile(name="Acme", source="fallback")) == 0
