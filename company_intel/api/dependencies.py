"""Singleton accessors injected into routes via `Depends`."""

from __future__ import annotations

from fastapi import Depends

from company_intel.clients.searxng import SearxngClient
from company_intel.services.analysis import CompanyAnalyzer
from company_intel.services.comparables import ComparableFinder
from company_intel.services.comparative import ComparativeAnalyzer
from company_intel.services.extraction.profile import ProfileExtractor
from company_intel.services.scoring.engine import ScoringEngine

_SEARCH_CLIENT: SearxngClient | None = None
_COMPANY_ANALYZER: CompanyAnalyzer | None = None


def get_search_client() -> SearxngClient:
    global _SEARCH_CLIENT  # noqa: PLW0603
    if _SEARCH_CLIENT is None:
        _SEARCH_CLIENT = SearxngClient.from_settings()
    return _SEARCH_CLIENT


def get_profile_extractor() -> ProfileExtractor:
    return ProfileExtractor()


def get_scoring_engine() -> ScoringEngine:
    return ScoringEngine()


def get_comparative_analyzer() -> ComparativeAnalyzer:
    return ComparativeAnalyzer()


def get_comparable_finder(
    client: SearxngClient = Depends(get_search_client),
    scoring: ScoringEngine = Depends(get_scoring_engine),
) -> ComparableFinder:
    return ComparableFinder(client, scoring=scoring)


def get_company_analyzer(client: SearxngClient = Depends(get_search_client)) -> CompanyAnalyzer:
    """One analyzer per search client so its profile cache follows the client."""
    global _COMPANY_ANALYZER  # noqa: PLW0603
    if _COMPANY_ANALYZER is None or _COMPANY_ANALYZER.gateway is not client:
        _COMPANY_ANALYZER = CompanyAnalyzer(client)
    return _COMPANY_ANALYZER


async def close_search_client() -> None:
    global _SEARCH_CLIENT, _COMPANY_ANALYZER  # noqa: PLW0603
    if _SEARCH_CLIENT is not None:
        await _SEARCH_CLIENT.aclose()
    _SEARCH_CLIENT = None
    _COMPANY_ANALYZER = None
