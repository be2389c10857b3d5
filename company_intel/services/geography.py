"""Infer a company's likely country, region and search language from its name."""

from __future__ import annotations

from dataclasses import dataclass

from company_intel.config import settings
from company_intel.models.search import GeographyContext


@dataclass(frozen=True)
class GeographyRule:
    markers: tuple[str, ...]
    context: GeographyContext


# Order encodes priority: legal-entity suffixes are checked before loose substrings.
GEOGRAPHY_RULES: tuple[GeographyRule, ...] = (
    GeographyRule(
        markers=(".pa ", " sa ", " sas ", " sarl ", " sasu ", "france", "français", "société"),
        context=GeographyContext(
            country="France",
            region="Europe",
            company_term="entreprise",
            financial_term="société information financière",
            language="french",
            default_language="fr",
        ),
    ),
    GeographyRule(
        markers=(" ltd", " plc", "british", " uk ", ".co.uk"),
        context=GeographyContext(
            country="United Kingdom",
            region="Europe",
            company_term="company",
            financial_term="corporation financial information",
            language="english",
            default_language="en",
        ),
    ),
    GeographyRule(
        markers=(" inc", " corp", " llc", "corporation", "usa", "america"),
        context=GeographyContext(
            country="United States",
            region="North America",
            company_term="company",
            financial_term="corporation financial information",
            language="english",
            default_language="en",
        ),
    ),
)


def international_context() -> GeographyContext:
    return GeographyContext(
        country="International",
        region=settings.default_region,
        company_term="company",
        financial_term="financial information",
        language="english",
        default_language="en",
    )


def detect_company_geography(company_name: str) -> GeographyContext:
    """Return the context of the first rule whose marker appears in the name."""
    padded = f" {company_name.strip().lower()} "
    for rule in GEOGRAPHY_RULES:
        if any(marker in padded for marker in rule.markers):
            return rule.context
    return international_context()
