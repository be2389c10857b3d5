"""Company profile models produced by extraction and enriched by scoring."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, confloat, conint

from company_intel.models.analysis import (
    BenchmarkScores,
    FinancialMetrics,
    MarketPositionAssessment,
    RiskProfile,
    ValuationEstimate,
)


class Leader(BaseModel):
    role: str
    name: str


class FundingInfo(BaseModel):
    type: str
    exchange: str | None = None


class MarketData(BaseModel):
    currency: str = "EUR"
    last_updated: str
    source: str


class CompanyProfile(BaseModel):
    """Structured view of a company built from noisy search-result text.

    Scoring stages never mutate a profile; they return an updated copy via
    `enrich`.
    """

    name: str
    source: str
    confidence: confloat(ge=0.0, le=1.0) = 0.0  # type: ignore[valid-type]
    sector: str | None = None
    industry: str | None = None
    country: str | None = None
    region: str | None = None
    employees: int | None = None
    employee_category: str | None = None
    revenue: str | None = None
    revenue_category: str | None = None
    size_category: str | None = None
    business_model: str | None = None
    main_activities: list[str] = Field(default_factory=list)
    competitors_mentioned: list[str] = Field(default_factory=list)
    market_position: str | None = None
    funding_info: FundingInfo | None = None
    leadership: list[Leader] = Field(default_factory=list)
    headquarters: str | None = None
    founding_year: int | None = None
    is_public: bool = False
    listing_status: str = "Private"
    description: str | None = None
    website: str | None = None
    key_points: list[str] = Field(default_factory=list)

    # Detailed extraction
    symbol: str | None = None
    subsidiaries: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    partnerships: list[str] = Field(default_factory=list)
    market_data: MarketData | None = None

    # Metrics extraction
    market_share: float | None = None
    growth_rate: float | None = None
    profitability: str | None = None

    # Scoring enrichments
    financial_metrics: FinancialMetrics | None = None
    risk_profile: RiskProfile | None = None
    valuation_estimate: ValuationEstimate | None = None
    market_position_assessment: MarketPositionAssessment | None = None
    benchmark_scores: BenchmarkScores | None = None
    is_main_company: bool = False

    def enrich(self, **fields: Any) -> "CompanyProfile":
        """Return a copy with the given derived fields set."""
        return self.model_copy(update=fields)


class ComparableCandidate(CompanyProfile):
    """Lower-confidence profile discovered while searching for comparables."""

    url: str | None = None
    extracted_from: str | None = None
    similarity_score: conint(ge=0, le=100) = 0  # type: ignore[valid-type]
    match_reasons: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
