"""Derived scoring structures attached to company profiles."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Productivity(str, Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FinancialMetrics(BaseModel):
    revenue_per_employee: int | None = None
    employee_productivity: Productivity = Productivity.UNKNOWN
    growth_stage: str = "unknown"
    market_presence: str = "limited"
    scalability_index: int = 50
    overall_health_score: int = 0
    growth_potential: int = 0
    stability_score: int = 50


class RiskAssessment(BaseModel):
    operational: str
    financial: str
    market: str
    data: str


class RiskProfile(BaseModel):
    level: RiskLevel = RiskLevel.LOW
    score: int = Field(default=0, ge=0, le=100)
    factors: list[str] = Field(default_factory=list)
    mitigation: list[str] = Field(default_factory=list)
    assessment: RiskAssessment


class ValuationEstimates(BaseModel):
    conservative: int | None = None
    average: int | None = None
    optimistic: int | None = None
    employee_based: int | None = None

    def present(self) -> list[int]:
        return [
            value
            for value in (self.conservative, self.average, self.optimistic, self.employee_based)
            if value is not None
        ]


class ValueRange(BaseModel):
    min: int
    max: int


class ValuationEstimate(BaseModel):
    method: str = "multi_factor_analysis"
    confidence: str = "low"
    estimates: ValuationEstimates = Field(default_factory=ValuationEstimates)
    factors: list[str] = Field(default_factory=list)
    adjustments: list[str] = Field(default_factory=list)
    recommended_value: int | None = None
    value_range: ValueRange | None = None


class MarketPositionAssessment(BaseModel):
    relative: str = "unknown"
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    threats: list[str] = Field(default_factory=list)


class BenchmarkScores(BaseModel):
    size: int = 50
    productivity: int = 50
    growth: int = 50
    stability: int = 50
    overall: int = 50


class RankingEntry(BaseModel):
    rank: int
    name: str
    value: float


class ComparativeSummary(BaseModel):
    total_companies: int
    average_employees: int | None = None
    average_revenue: int | None = None
    sectors_represented: int = 0
    countries_represented: int = 0


class Rankings(BaseModel):
    by_size: list[RankingEntry] = Field(default_factory=list)
    by_revenue: list[RankingEntry] = Field(default_factory=list)
    by_health_score: list[RankingEntry] = Field(default_factory=list)


class ComparativeAnalysis(BaseModel):
    summary: ComparativeSummary
    rankings: Rankings
    insights: list[str] = Field(default_factory=list)


class Recommendation(BaseModel):
    type: str
    priority: str
    title: str
    description: str
    actions: list[str] = Field(default_factory=list)


class AnalysisStats(BaseModel):
    sector_distribution: dict[str, int] = Field(default_factory=dict)
    risk_distribution: dict[str, int] = Field(default_factory=dict)
    performance_ranking: list[RankingEntry] = Field(default_factory=list)
