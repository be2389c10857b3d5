"""Weighted-factor similarity between a reference company and a candidate."""

from __future__ import annotations

from company_intel.models.company import CompanyProfile
from company_intel.services.extraction.taxonomy import COUNTRY_REGIONS

SECTOR_EXACT_POINTS = 40
SECTOR_GROUP_POINTS = 25
COUNTRY_EXACT_POINTS = 30
COUNTRY_REGION_POINTS = 15
SIZE_EXACT_POINTS = 20
SIZE_ADJACENT_POINTS = 10
CONFIDENCE_WEIGHT = 10
MISSING_DATA_FLOOR = 40
DEFAULT_CANDIDATE_CONFIDENCE = 0.5

SIMILAR_SECTOR_GROUPS: tuple[frozenset[str], ...] = (
    frozenset({"technology", "consulting", "it services"}),
    frozenset({"finance", "banking", "insurance"}),
    frozenset({"healthcare", "pharmaceutical", "biotechnology"}),
)

SIZE_SCALE: tuple[str, ...] = ("micro", "small", "medium", "large", "enterprise")


def _sector_points(reference: str, candidate: str) -> int:
    ref, cand = reference.lower(), candidate.lower()
    if ref == cand:
        return SECTOR_EXACT_POINTS
    if any(ref in group and cand in group for group in SIMILAR_SECTOR_GROUPS):
        return SECTOR_GROUP_POINTS
    return 0


def _country_points(reference: str, candidate: str) -> int:
    if reference.lower() == candidate.lower():
        return COUNTRY_EXACT_POINTS
    ref_region = COUNTRY_REGIONS.get(reference)
    if ref_region and ref_region == COUNTRY_REGIONS.get(candidate):
        return COUNTRY_REGION_POINTS
    return 0


def _size_points(reference: str, candidate: str) -> int:
    if reference == candidate:
        return SIZE_EXACT_POINTS
    if reference in SIZE_SCALE and candidate in SIZE_SCALE:
        if abs(SIZE_SCALE.index(reference) - SIZE_SCALE.index(candidate)) <= 1:
            return SIZE_ADJACENT_POINTS
    return 0


def calculate_similarity(reference: CompanyProfile, candidate: CompanyProfile) -> int:
    """Score 0-100; fewer than two comparable factors floors the score at 40."""
    score = 0.0
    factors = 0
    if reference.sector and candidate.sector:
        score += _sector_points(reference.sector, candidate.sector)
        factors += 1
    if reference.country and candidate.country:
        score += _country_points(reference.country, candidate.country)
        factors += 1
    if reference.size_category and candidate.size_category:
        score += _size_points(reference.size_category, candidate.size_category)
        factors += 1
    score += (candidate.confidence or DEFAULT_CANDIDATE_CONFIDENCE) * CONFIDENCE_WEIGHT
    if factors < 2:
        score = max(score, MISSING_DATA_FLOOR)
    return round(min(max(score, 0), 100))


def match_reasons(reference: CompanyProfile, candidate: CompanyProfile, score: int) -> list[str]:
    reasons: list[str] = []
    if reference.sector and candidate.sector and reference.sector.lower() == candidate.sector.lower():
        reasons.append(f"Same sector: {candidate.sector}")
    if reference.country and candidate.country and reference.country.lower() == candidate.country.lower():
        reasons.append(f"Same country: {candidate.country}")
    if reference.size_category and reference.size_category == candidate.size_category:
        reasons.append(f"Same size: {candidate.size_category}")
    if score > 80:
        reasons.append("Very high overall similarity")
    elif score > 60:
        reasons.append("High overall similarity")
    return reasons


def candidate_risk_factors(candidate: CompanyProfile) -> list[str]:
    factors: list[str] = []
    if candidate.confidence < 0.5:
        factors.append("Low data confidence")
    if candidate.source == "web_search_extraction":
        factors.append("Data extracted from web search, verification recommended")
    if not candidate.sector:
        factors.append("Sector not identified")
    if not candidate.country:
        factors.append("Country not identified")
    return factors
