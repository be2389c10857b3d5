"""Models exchanged with the SearXNG search backend."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

UNTITLED_PLACEHOLDER = "Sans titre"


class SearchOptions(BaseModel):
    """Caller-supplied tuning for a single search."""

    model_config = ConfigDict(frozen=True)

    language: str | None = None
    page: int = Field(default=1, ge=1)
    categories: str | None = None
    engines: str | None = None


class SearchParams(BaseModel):
    """Query string parameters sent to the backend after focus rewriting."""

    model_config = ConfigDict(frozen=True)

    q: str
    categories: str = "general"
    engines: str = ""
    lang: str = "fr"
    pageno: int = 1

    def as_query_params(self) -> dict[str, str | int]:
        return {"format": "json", **self.model_dump()}


class SearchResultItem(BaseModel):
    """Single normalized hit returned by the backend."""

    model_config = ConfigDict(frozen=True)

    title: str = UNTITLED_PLACEHOLDER
    url: str = ""
    content: str = ""
    engine: str = "unknown"
    score: float = 0.0
    published_date: str | None = None
    category: str = "general"


class SearchInfo(BaseModel):
    engines: list[str] = Field(default_factory=list)
    search_time: float | None = None
    suggestions: list[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SearchResponse(BaseModel):
    """Formatted backend response, annotated with the focus mode that produced it."""

    query: str
    total_results: int = 0
    success: bool = True
    configured: bool = True
    error: str | None = None
    results: list[SearchResultItem] = Field(default_factory=list)
    search_info: SearchInfo | None = None
    focus_mode: str | None = None
    focus_description: str | None = None
    optimized_query: str | None = None
    original_query: str | None = None

    @classmethod
    def not_configured(cls, query: str, error: str) -> "SearchResponse":
        return cls(query=query, success=False, configured=False, error=error)


class GeographyContext(BaseModel):
    """Localization hints inferred from a company name."""

    model_config = ConfigDict(frozen=True)

    country: str
    region: str
    company_term: str
    financial_term: str
    language: str
    default_language: str


class QueryOutcome(BaseModel):
    query: str
    focus_mode: str | None = None
    focus_description: str | None = None
    results: list[SearchResultItem] = Field(default_factory=list)
    geo_context: GeographyContext | None = None


class CompanySearchBundle(BaseModel):
    """Aggregated results of the localized queries issued for one company."""

    company_name: str
    success: bool = True
    configured: bool = True
    error: str | None = None
    search_results: list[QueryOutcome] = Field(default_factory=list)
    total_queries: int = 0
    successful_queries: int = 0
    detected_geography: GeographyContext | None = None
    enhanced_with_focus: bool = True

    @property
    def all_results(self) -> list[SearchResultItem]:
        return [item for outcome in self.search_results for item in outcome.results]
