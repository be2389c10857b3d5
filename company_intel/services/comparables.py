"""Discovers comparable companies by mining names out of targeted searches."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence
from typing import Protocol

from pydantic import BaseModel, Field

from company_intel.config import settings
from company_intel.models.company import ComparableCandidate, CompanyProfile
from company_intel.models.search import SearchOptions, SearchResponse, SearchResultItem
from company_intel.observability.metrics import metrics
from company_intel.services.extraction import fields
from company_intel.services.extraction.taxonomy import keyword_present
from company_intel.services.scoring.engine import ScoringEngine

logger = logging.getLogger(__name__)

CANDIDATE_CONFIDENCE = 0.6
WEB_EXTRACTION_SOURCE = "web_search_extraction"
COMPETITOR_SOURCE = "competitor_extraction"
TECH_CONSULTING_SECTORS = ("technology", "consulting")

LEGAL_SUFFIX_PATTERN = re.compile(
    r"\b((?:[A-Z][\w&'-]*\s+){0,3}?[A-Z][\w&'-]*)\s+(SE|SAS|SARL|SA|Inc|Corp|Ltd|LLC)\b"
)
INTRODUCED_NAME_PATTERN = re.compile(
    r"(?i:\b(?:company|société|entreprise))\s+([A-Z][\w&'-]*(?:\s+[A-Z][\w&'-]*){0,3})"
)
_LEADING_STOPWORD = re.compile(
    r"^(?:the|a|an|le|la|les|un|une|des|page|article|news|info|site)\b", flags=re.IGNORECASE
)
_YEAR = re.compile(r"\b\d{4}\b")
_LEADING_MONTH = re.compile(
    r"^(?:january|february|march|april|may|june|july|august|september|october|november|december|"
    r"janvier|février|mars|avril|mai|juin|juillet|août|septembre|octobre|novembre|décembre)\b",
    flags=re.IGNORECASE,
)
WEB_ARTEFACTS = ("page", "article", "news", "site", "www", "http", "com")


class SearchGateway(Protocol):
    async def search(
        self,
        query: str,
        options: SearchOptions | None = None,
        focus_mode: str | None = None,
    ) -> SearchResponse: ...


class ComparableSearchResult(BaseModel):
    comparables: list[ComparableCandidate] = Field(default_factory=list)
    total_candidates: int = 0
    queries_issued: int = 0
    failed_queries: int = 0


def dedup_key(name: str) -> str:
    """Lowercase and strip everything but ASCII letters and digits."""
    return re.sub(r"[^a-z0-9]", "", name.lower())


def is_valid_company_name(name: str, reference_name: str) -> bool:
    stripped = name.strip()
    if not 3 <= len(stripped) <= 100:
        return False
    if stripped.lower() == reference_name.strip().lower() or dedup_key(stripped) == dedup_key(reference_name):
        return False
    if _LEADING_STOPWORD.match(stripped) or _LEADING_MONTH.match(stripped):
        return False
    return _YEAR.search(stripped) is None


def is_valid_peer_name(name: str, reference_name: str) -> bool:
    if not 3 <= len(name.strip()) <= 50:
        return False
    if any(keyword_present(name, artefact) for artefact in WEB_ARTEFACTS):
        return False
    return is_valid_company_name(name, reference_name)


def extract_company_names(text: str) -> list[str]:
    """Capitalized names followed by a legal suffix or introduced as a company."""
    names = [f"{match.group(1)} {match.group(2)}" for match in LEGAL_SUFFIX_PATTERN.finditer(text)]
    names.extend(match.group(1) for match in INTRODUCED_NAME_PATTERN.finditer(text))
    return [" ".join(name.split()) for name in names]


def deduplicate(candidates: Iterable[ComparableCandidate]) -> list[ComparableCandidate]:
    """Keep the first candidate for each dedup key."""
    seen: set[str] = set()
    unique: list[ComparableCandidate] = []
    for candidate in candidates:
        key = dedup_key(candidate.name)
        if key and key not in seen:
            seen.add(key)
            unique.append(candidate)
    return unique


def build_comparable_queries(
    reference: CompanyProfile, *, prefer_same_country: bool = True
) -> list[tuple[str, str]]:
    sector = (reference.sector or settings.default_sector).lower()
    size = reference.size_category or "medium"
    queries = [
        (f"concurrents {sector} entreprises similaires", "competitorAnalysis"),
        (f"entreprises {sector} {size} taille", "companyResearch"),
        (f"leaders {sector} top entreprises", "marketAnalysis"),
    ]
    if prefer_same_country and reference.country:
        queries.append((f"entreprises {sector} {reference.country}", "companyResearch"))
    else:
        queries.append((f"international {sector} companies", "companyResearch"))
    if sector in TECH_CONSULTING_SECTORS:
        queries.append(("sociétés conseil technologie consulting", "competitorAnalysis"))
    return queries


def build_peer_queries(reference: CompanyProfile) -> list[tuple[str, str]]:
    sector = (reference.sector or settings.default_sector).lower()
    country = reference.country or ""
    return [
        (f"concurrents {sector} {country}".strip(), "competitorAnalysis"),
        (f"entreprises similaires {sector}", "competitorAnalysis"),
        (f"leaders {sector} secteur", "competitorAnalysis"),
    ]


def summarize_breakdown(reference: CompanyProfile, comparables: Sequence[ComparableCandidate]) -> dict[str, float | int]:
    public = sum(1 for item in comparables if item.is_public)
    same_country = sum(1 for item in comparables if reference.country and item.country == reference.country)
    average = sum(item.similarity_score for item in comparables) / len(comparables) if comparables else 0
    return {
        "total": len(comparables),
        "private": len(comparables) - public,
        "public": public,
        "same_country": same_country,
        "average_similarity": round(average),
    }


def results_quality(comparables: Sequence[ComparableCandidate], queries_issued: int) -> dict[str, int]:
    if not comparables:
        return {"overall_confidence": 0, "data_completeness": 0, "diversity_score": 0, "search_efficiency": 0}
    count = len(comparables)
    confidence = sum(item.confidence for item in comparables) / count
    completeness = sum(
        sum(1 for value in (item.sector, item.country, item.description, item.url) if value) / 4
        for item in comparables
    ) / count
    sectors = {item.sector for item in comparables if item.sector}
    countries = {item.country for item in comparables if item.country}
    diversity = (len(sectors) + len(countries)) / (2 * min(count, 5))
    efficiency = count / queries_issued if queries_issued else 0
    return {
        "overall_confidence": round(confidence * 100),
        "data_completeness": round(completeness * 100),
        "diversity_score": round(min(diversity, 1) * 100),
        "search_efficiency": round(min(efficiency, 1) * 100),
    }


class ComparableFinder:
    """Fans out competitor-oriented searches and scores the names it finds."""

    def __init__(
        self,
        gateway: SearchGateway,
        *,
        scoring: ScoringEngine | None = None,
        max_results_cap: int | None = None,
    ) -> None:
        self._gateway = gateway
        self._scoring = scoring or ScoringEngine()
        self._cap = max_results_cap or settings.max_comparables_cap

    async def _run_queries(
        self, queries: Sequence[tuple[str, str]]
    ) -> tuple[list[SearchResultItem], int]:
        """Issue all queries concurrently; failed ones contribute nothing."""
        outcomes = await asyncio.gather(
            *(self._gateway.search(query, None, mode) for query, mode in queries),
            return_exceptions=True,
        )
        results: list[SearchResultItem] = []
        failed = 0
        for (query, mode), outcome in zip(queries, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                failed += 1
                metrics.increment("comparables.subquery_failed", tags={"focus_mode": mode})
                logger.warning(
                    "comparables.subquery_failed",
                    extra={"query": query, "focus_mode": mode, "error": str(outcome)},
                )
                continue
            if outcome.success:
                results.extend(outcome.results)
        return results, failed

    def extract_candidates(
        self,
        results: Sequence[SearchResultItem],
        reference: CompanyProfile,
        *,
        source: str = WEB_EXTRACTION_SOURCE,
    ) -> list[ComparableCandidate]:
        validator = is_valid_peer_name if source == COMPETITOR_SOURCE else is_valid_company_name
        candidates: list[ComparableCandidate] = []
        for item in results:
            text = f"{item.title} {item.content}"
            lowered = text.lower()
            for name in extract_company_names(text):
                if not validator(name, reference.name):
                    continue
                country = fields.extract_country(lowered)
                candidates.append(
                    ComparableCandidate(
                        name=name,
                        source=source,
                        confidence=CANDIDATE_CONFIDENCE,
                        url=item.url or None,
                        description=f"{item.content[:200]}..." if item.content else None,
                        sector=fields.extract_sector(lowered),
                        country=country,
                        region=fields.region_for_country(country, settings.default_region) if country else None,
                        size_category=fields.guess_size_category(lowered, default=None),
                        is_public=fields.guess_is_public(lowered),
                        extracted_from=item.title,
                    )
                )
        return deduplicate(candidates)

    async def find_comparables(
        self,
        reference: CompanyProfile,
        max_results: int = 10,
        min_similarity: int = 50,
        prefer_same_country: bool = True,
    ) -> ComparableSearchResult:
        """Return scored candidates above `min_similarity`, best first."""
        queries = build_comparable_queries(reference, prefer_same_country=prefer_same_country)
        results, failed = await self._run_queries(queries)
        candidates = self.extract_candidates(results, reference)
        scored = [self._scoring.score_candidate(reference, candidate) for candidate in candidates]
        kept = sorted(
            (candidate for candidate in scored if candidate.similarity_score >= min_similarity),
            key=lambda candidate: candidate.similarity_score,
            reverse=True,
        )[: min(max_results, self._cap)]
        metrics.gauge("comparables.candidates", len(candidates))
        logger.info(
            "comparables.found",
            extra={"company": reference.name, "candidates": len(candidates), "kept": len(kept)},
        )
        return ComparableSearchResult(
            comparables=kept,
            total_candidates=len(candidates),
            queries_issued=len(queries),
            failed_queries=failed,
        )

    async def discover_peers(
        self, reference: CompanyProfile, max_results: int = 5
    ) -> list[ComparableCandidate]:
        """Unfiltered competitor names for the metrics analysis."""
        if max_results <= 0:
            return []
        results, _ = await self._run_queries(build_peer_queries(reference))
        peers = self.extract_candidates(results, reference, source=COMPETITOR_SOURCE)
        return peers[: min(max_results, self._cap)]
