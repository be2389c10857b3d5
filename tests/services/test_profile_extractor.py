from __future__ import annotations

from company_intel.models.search import SearchResultItem
from company_intel.services.extraction.profile import (
    ExtractionVariant,
    ProfileExtractor,
    confidence_for,
)


def _results(count: int = 1) -> list[SearchResultItem]:
    base = [
        SearchResultItem(
            title="Capgemini SE: consulting and technology services",
            url="https://www.capgemini.com/about",
            content=(
                "Capgemini is a French consulting and software company headquartered in Paris. "
                "Founded in 1967, the group has 340,000 employees and a chiffre d'affaires de "
                "22,5 milliards. CEO Aiman Ezzat. Listed on euronext, its stock is public. "
                "Market share of 4% and growth of 6%, the group remains profitable. "
                "ISO certified, partner of Microsoft. Frog is a subsidiary of Capgemini Invent."
            ),
        )
    ]
    filler = [
        SearchResultItem(title=f"Capgemini news {index}", url=f"https://news.example/{index}", content="")
        for index in range(count - 1)
    ]
    return base + filler


def test_confidence_depends_on_result_volume():
    rules = ExtractionVariant.BASIC.value

    assert confidence_for(0, rules) == 0.0
    assert confidence_for(5, rules) == 0.6
    assert confidence_for(6, rules) == 0.8
    assert confidence_for(10, ExtractionVariant.DETAILED.value) == 0.7
    assert confidence_for(11, ExtractionVariant.DETAILED.value) == 0.9


def test_basic_profile_fields():
    extractor = ProfileExtractor(default_sector="Technology", default_region="Global")

    profile = extractor.extract("Capgemini", _results(6))

    assert profile.source == "web_search_analysis"
    assert profile.confidence == 0.8
    assert profile.country == "France"
    assert profile.region == "Europe"
    assert profile.employees == 340_000
    assert profile.employee_category == "enterprise"
    assert profile.size_category == "enterprise"
    assert profile.revenue == "€22500M"
    assert profile.revenue_category == "enterprise"
    assert profile.headquarters == "Paris"
    assert profile.founding_year == 1967
    assert profile.is_public is True
    assert profile.listing_status == "Listed"
    assert profile.website == "https://www.capgemini.com"
    assert [leader.name for leader in profile.leadership] == ["Aiman Ezzat"]
    assert profile.subsidiaries == []
    assert profile.market_share is None


def test_detailed_variant_adds_symbol_and_certifications():
    extractor = ProfileExtractor()

    profile = extractor.extract("CAP.PA", _results(), ExtractionVariant.DETAILED, symbol="cap.pa")

    assert profile.source == "web_search_detailed"
    assert profile.confidence == 0.7
    assert profile.symbol == "CAP.PA"
    assert profile.market_data is not None
    assert profile.market_data.currency == "EUR"
    assert profile.certifications == ["ISO"]
    assert profile.partnerships == ["Microsoft"]
    assert profile.subsidiaries == ["Capgemini Invent"]


def test_metrics_variant_adds_market_fields():
    profile = ProfileExtractor().extract("Capgemini", _results(), ExtractionVariant.METRICS)

    assert profile.source == "web_search_metrics"
    assert profile.market_share == 4
    assert profile.growth_rate == 6
    assert profile.profitability == "profitable"


def test_empty_results_give_zero_confidence_and_defaults():
    extractor = ProfileExtractor(default_sector="Technology", default_region="Global")

    profile = extractor.extract("Unknown Co", [])

    assert profile.confidence == 0.0
    assert profile.sector == "Technology"
    assert profile.region == "Global"
    assert profile.employees is None
    assert profile.size_category == "medium"
    assert profile.description is None
