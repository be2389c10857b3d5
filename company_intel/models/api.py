"""Request and response payloads for the HTTP endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from company_intel.models.analysis import AnalysisStats, ComparativeAnalysis, Recommendation
from company_intel.models.company import ComparableCandidate, CompanyProfile
from company_intel.services.quality import DataQuality, ResponseMetadata
from company_intel.utils.text import sanitize_text


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Any) -> Any:
    return sanitize_text(value) if isinstance(value, str) else value


class CompanySearchRequest(BaseModel):
    query: str = Field(min_length=2, max_length=100)

    _sanitize = field_validator("query", mode="before")(_clean)


class CompanyDetailsRequest(BaseModel):
    symbol: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=2, max_length=100)

    _sanitize = field_validator("symbol", "name", mode="before")(_clean)

    @property
    def identifier(self) -> str:
        return self.symbol or self.name or ""


class CompanyAnalyzeRequest(BaseModel):
    company_name: str = Field(min_length=2, max_length=100)

    _sanitize = field_validator("company_name", mode="before")(_clean)


class ComparablesRequest(BaseModel):
    company_name: str = Field(min_length=2, max_length=100)
    max_results: int = Field(default=10, ge=1, le=100)
    min_similarity: int = Field(default=50, ge=0, le=100)
    prefer_same_country: bool = True

    _sanitize = field_validator("company_name", mode="before")(_clean)


class MetricsAnalysisRequest(BaseModel):
    company_name: str = Field(min_length=2, max_length=100)
    include_comparables: bool = True
    max_comparables: int = Field(default=5, ge=0, le=20)

    _sanitize = field_validator("company_name", mode="before")(_clean)


class CompanyProfileResponse(BaseModel):
    success: bool = True
    data: CompanyProfile
    search_query: str
    analysis_timestamp: datetime = Field(default_factory=_utc_now)
    data_quality: DataQuality
    metadata: ResponseMetadata


class CompanyAnalysisResponse(CompanyProfileResponse):
    relevance_score: int = 0


class ComparablesResponse(BaseModel):
    success: bool = True
    reference_company: CompanyProfile
    comparables: list[ComparableCandidate]
    total_found: int
    breakdown: dict[str, float | int]
    results_quality: dict[str, int]
    search_criteria: dict[str, Any]
    metadata: ResponseMetadata


class MetricsAnalysisResponse(BaseModel):
    success: bool = True
    main_company: CompanyProfile
    comparables: list[CompanyProfile] = Field(default_factory=list)
    comparative_analysis: ComparativeAnalysis
    recommendations: list[Recommendation] = Field(default_factory=list)
    analysis_stats: AnalysisStats
    methodology: dict[str, str]
    metadata: ResponseMetadata


class ConnectionRecommendation(BaseModel):
    type: str
    message: str
    action: str


class ConnectionReport(BaseModel):
    success: bool
    message: str
    timestamp: datetime = Field(default_factory=_utc_now)
    connectivity: dict[str, Any]
    authentication: dict[str, Any]
    service_configuration: dict[str, str]
    service_stats: dict[str, Any]
    recommendations: list[ConnectionRecommendation] = Field(default_factory=list)
