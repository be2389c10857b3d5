"""Builds CompanyProfile records from aggregated search results."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from company_intel.config import settings
from company_intel.models.company import CompanyProfile, MarketData
from company_intel.models.search import SearchResultItem
from company_intel.services.extraction import fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantRules:
    source: str
    result_threshold: int
    high_confidence: float
    low_confidence: float


class ExtractionVariant(Enum):
    BASIC = VariantRules("web_search_analysis", 5, 0.8, 0.6)
    DETAILED = VariantRules("web_search_detailed", 10, 0.9, 0.7)
    METRICS = VariantRules("web_search_metrics", 10, 0.9, 0.7)


@dataclass(frozen=True)
class SearchCorpus:
    """Original-case and lowercased views over the same result text."""

    text: str
    lowered: str
    result_count: int

    @classmethod
    def from_results(cls, results: Sequence[SearchResultItem]) -> "SearchCorpus":
        text = "\n".join(f"{item.title} {item.content}" for item in results)
        return cls(text=text, lowered=text.lower(), result_count=len(results))


def confidence_for(result_count: int, rules: VariantRules) -> float:
    """Evidence-volume confidence; zero results means zero confidence."""
    if result_count == 0:
        return 0.0
    return rules.high_confidence if result_count > rules.result_threshold else rules.low_confidence


class ProfileExtractor:
    """Applies the field heuristics to one company's search results."""

    def __init__(self, *, default_sector: str | None = None, default_region: str | None = None) -> None:
        self._default_sector = default_sector or settings.default_sector
        self._default_region = default_region or settings.default_region

    def extract(
        self,
        identifier: str,
        results: Sequence[SearchResultItem],
        variant: ExtractionVariant = ExtractionVariant.BASIC,
        *,
        symbol: str | None = None,
        confidence: float | None = None,
        source: str | None = None,
    ) -> CompanyProfile:
        """Return a profile; fields without evidence stay empty."""
        rules = variant.value
        corpus = SearchCorpus.from_results(results)
        lowered = corpus.lowered

        employees = fields.extract_employee_count(lowered)
        revenue_millions = fields.extract_revenue_millions(lowered)
        country = fields.extract_country(lowered)
        is_public = fields.guess_is_public(lowered) or bool(symbol)

        profile = CompanyProfile(
            name=identifier,
            source=source or rules.source,
            confidence=confidence if confidence is not None else confidence_for(corpus.result_count, rules),
            sector=fields.extract_sector(lowered, self._default_sector),
            industry=fields.extract_industry(lowered),
            country=country,
            region=fields.region_for_country(country, self._default_region),
            employees=employees,
            employee_category=fields.categorize_employees(employees),
            revenue=fields.format_revenue(revenue_millions) if revenue_millions is not None else None,
            revenue_category=fields.categorize_revenue(revenue_millions),
            size_category=fields.categorize_employees(employees) or fields.guess_size_category(lowered),
            business_model=fields.extract_business_model(lowered),
            main_activities=fields.extract_main_activities(lowered),
            competitors_mentioned=fields.extract_competitors(lowered),
            market_position=fields.extract_market_position(lowered),
            funding_info=fields.extract_funding_info(lowered),
            leadership=fields.extract_leadership(corpus.text),
            headquarters=fields.extract_headquarters(corpus.text),
            founding_year=fields.extract_founding_year(lowered),
            is_public=is_public,
            listing_status="Listed" if is_public else "Private",
            description=fields.create_description(results),
            website=fields.extract_website(results, identifier),
            key_points=fields.extract_key_points(results),
        )

        if variant is ExtractionVariant.DETAILED:
            profile = profile.enrich(
                subsidiaries=fields.extract_subsidiaries(corpus.text),
                certifications=fields.extract_certifications(lowered),
                partnerships=fields.extract_partnerships(lowered),
            )
            if symbol:
                profile = profile.enrich(
                    symbol=symbol.upper(),
                    market_data=MarketData(
                        last_updated=datetime.now(timezone.utc).isoformat(),
                        source=rules.source,
                    ),
                )
        elif variant is ExtractionVariant.METRICS:
            profile = profile.enrich(
                market_share=fields.extract_market_share(lowered),
                growth_rate=fields.extract_growth_rate(lowered),
                profitability=fields.extract_profitability(lowered),
            )

        logger.debug(
            "extraction.profile_built",
            extra={"company": identifier, "variant": variant.name, "results": corpus.result_count},
        )
        return profile
