"""Data-quality and metadata envelopes returned alongside profiles."""

from __future__ import annotations

from pydantic import BaseModel, Field

from company_intel.models.company import CompanyProfile
from company_intel.models.search import GeographyContext

API_VERSION = "1.0"
SEARCH_ENGINE = "SearXNG"

BASIC_COMPLETENESS_FIELDS = (
    "sector",
    "industry",
    "country",
    "employees",
    "revenue",
    "description",
    "headquarters",
)
DETAILED_COMPLETENESS_FIELDS = BASIC_COMPLETENESS_FIELDS + ("founding_year",)


class DataQuality(BaseModel):
    confidence: float
    completeness: int
    sources: list[str] = Field(default_factory=list)
    validation_score: float
    is_generated: bool = False
    indicators: list[str] = Field(default_factory=list)
    search_results_count: int = 0
    search_queries: int = 0


class ResponseMetadata(BaseModel):
    search_duration_ms: int
    api_version: str = API_VERSION
    endpoint: str
    search_engine: str = SEARCH_ENGINE
    total_web_queries: int = 0
    geography_detected: GeographyContext | None = None


def calculate_completeness(
    profile: CompanyProfile, field_names: tuple[str, ...] = BASIC_COMPLETENESS_FIELDS
) -> int:
    """Percentage of the listed fields that carry a value."""
    filled = sum(1 for name in field_names if getattr(profile, name) not in (None, "", []))
    return round(filled / len(field_names) * 100)


def quality_indicators(profile: CompanyProfile, *, detailed: bool = False) -> list[str]:
    indicators: list[str] = []
    if profile.confidence > 0.8:
        indicators.append("High confidence")
    if profile.sector:
        indicators.append("Sector identified")
    if profile.employees:
        indicators.append("HR data available")
    if profile.revenue:
        indicators.append("Financial data available")
    if profile.competitors_mentioned:
        indicators.append("Competitive landscape identified")
    if detailed:
        if profile.founding_year:
            indicators.append("Company history available")
        if profile.headquarters:
            indicators.append("Location identified")
        if profile.leadership:
            indicators.append("Leadership identified")
    indicators.append("Validated web source")
    return indicators


def build_data_quality(
    profile: CompanyProfile,
    *,
    search_results_count: int,
    search_queries: int,
    detailed: bool = False,
) -> DataQuality:
    completeness_fields = DETAILED_COMPLETENESS_FIELDS if detailed else BASIC_COMPLETENESS_FIELDS
    return DataQuality(
        confidence=profile.confidence,
        completeness=calculate_completeness(profile, completeness_fields),
        sources=[profile.source],
        validation_score=profile.confidence,
        is_generated=profile.source == "fallback",
        indicators=quality_indicators(profile, detailed=detailed),
        search_results_count=search_results_count,
        search_queries=search_queries,
    )
