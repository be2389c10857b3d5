"""Multi-query deep research producing a cached company profile."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass

from company_intel.config import settings
from company_intel.models.company import CompanyProfile
from company_intel.models.search import SearchResultItem
from company_intel.observability.metrics import metrics
from company_intel.services.cache import TTLCache
from company_intel.services.comparables import SearchGateway
from company_intel.services.extraction.profile import ExtractionVariant, ProfileExtractor

logger = logging.getLogger(__name__)

DEEP_ANALYSIS_SOURCE = "deep_web_analysis"
FALLBACK_SOURCE = "fallback"
FALLBACK_CONFIDENCE = 0.1

RESEARCH_QUERIES: tuple[tuple[str, str | None], ...] = (
    ('"{name}" company profile', "companyResearch"),
    ("{name} chiffre d'affaires revenue", "financialSearch"),
    ("{name} employees effectif", "companyResearch"),
    ("{name} headquarters siège social", "companyResearch"),
    ("{name} founded history", "companyResearch"),
    ("{name} competitors", "competitorAnalysis"),
    ("{name} market sector", "marketAnalysis"),
)


def normalize_name(name: str) -> str:
    return re.sub(r"\s+", " ", name.strip().lower())


def is_relevant(item: SearchResultItem, company_name: str) -> bool:
    """A result is relevant when it mentions the company name."""
    needle = normalize_name(company_name)
    return bool(needle) and needle in f"{item.title} {item.content}".lower()


def company_relevance_score(profile: CompanyProfile) -> int:
    score = 0
    if profile.revenue:
        score += 10
    if profile.employees:
        score += 10
    if profile.description:
        score += 5
    if profile.competitors_mentioned:
        score += 5
    if profile.confidence > 0.7:
        score += 10
    return score


@dataclass(frozen=True)
class DeepAnalysis:
    profile: CompanyProfile
    relevant_results: int
    queries: int


class CompanyAnalyzer:
    """Runs the research queries concurrently and caches the resulting profile."""

    def __init__(
        self,
        gateway: SearchGateway,
        *,
        extractor: ProfileExtractor | None = None,
        cache_ttl_seconds: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._extractor = extractor or ProfileExtractor()
        ttl = cache_ttl_seconds if cache_ttl_seconds is not None else settings.profile_cache_ttl_seconds
        self._cache: TTLCache[DeepAnalysis] = TTLCache(ttl)

    @property
    def gateway(self) -> SearchGateway:
        return self._gateway

    def fallback_profile(self, company_name: str) -> CompanyProfile:
        return CompanyProfile(
            name=company_name,
            source=FALLBACK_SOURCE,
            confidence=FALLBACK_CONFIDENCE,
            sector=settings.default_sector,
            region=settings.default_region,
        )

    async def analyze_company(self, company_name: str) -> CompanyProfile:
        return (await self.analyze(company_name)).profile

    async def analyze(self, company_name: str) -> DeepAnalysis:
        """Return the cached analysis or research the company afresh.

        Fallback profiles are not cached so a later call can recover once the
        backend answers again.
        """
        key = normalize_name(company_name)
        cached = self._cache.get(key)
        if cached is not None:
            metrics.increment("analysis.profile_cache_hit")
            return cached

        relevant = await self._research(company_name)
        if not relevant:
            logger.warning("analysis.fallback_profile", extra={"company": company_name})
            return DeepAnalysis(
                profile=self.fallback_profile(company_name),
                relevant_results=0,
                queries=len(RESEARCH_QUERIES),
            )

        profile = self._extractor.extract(
            company_name,
            relevant,
            ExtractionVariant.DETAILED,
            confidence=min(len(relevant) / 10, 1.0),
            source=DEEP_ANALYSIS_SOURCE,
        )
        analysis = DeepAnalysis(
            profile=profile, relevant_results=len(relevant), queries=len(RESEARCH_QUERIES)
        )
        self._cache.set(key, analysis)
        return analysis

    async def _research(self, company_name: str) -> list[SearchResultItem]:
        queries = [(template.format(name=company_name), mode) for template, mode in RESEARCH_QUERIES]
        outcomes = await asyncio.gather(
            *(self._gateway.search(query, None, mode) for query, mode in queries),
            return_exceptions=True,
        )
        relevant: list[SearchResultItem] = []
        seen_urls: set[str] = set()
        for (query, _), outcome in zip(queries, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning("analysis.query_failed", extra={"query": query, "error": str(outcome)})
                continue
            for item in outcome.results:
                if item.url and item.url in seen_urls:
                    continue
                if is_relevant(item, company_name):
                    seen_urls.add(item.url)
                    relevant.append(item)
        return relevant
