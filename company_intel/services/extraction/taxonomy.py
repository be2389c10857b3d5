"""Declarative keyword tables consumed by the extraction heuristics.

Every table is an ordered tuple so that priority is explicit: count-based
matches break ties by position and first-match lookups stop at the first
group with a hit.
"""

from __future__ import annotations

import re
from enum import Enum
from functools import lru_cache

KeywordTable = tuple[tuple[str, tuple[str, ...]], ...]


class MatchRule(str, Enum):
    COUNT = "count"
    FIRST = "first"


SECTOR_KEYWORDS: KeywordTable = (
    (
        "Technology",
        (
            "technology",
            "technologies",
            "tech",
            "software",
            "digital",
            "it services",
            "innovation",
            "informatique",
            "numérique",
            "logiciel",
        ),
    ),
    (
        "Finance",
        (
            "finance",
            "financial services",
            "bank",
            "banking",
            "banque",
            "investment",
            "insurance",
            "assurance",
            "asset management",
        ),
    ),
    (
        "Healthcare",
        ("healthcare", "health", "medical", "pharmaceutical", "pharma", "biotechnology", "santé"),
    ),
    (
        "Manufacturing",
        ("manufacturing", "industrial", "factory", "production", "automotive", "industriel"),
    ),
    ("Retail", ("retail", "e-commerce", "commerce", "consumer", "store", "distribution")),
    ("Energy", ("energy", "oil", "gas", "renewable", "power", "électricité", "énergie")),
    ("Consulting", ("consulting", "conseil", "advisory", "strategy", "management consulting")),
    (
        "Telecommunications",
        ("telecom", "telecommunications", "mobile", "internet", "communications"),
    ),
)

INDUSTRY_KEYWORDS: KeywordTable = (
    ("IT Consulting", ("it consulting", "technology consulting", "digital consulting", "conseil informatique")),
    ("Software Development", ("software development", "software engineering", "développement logiciel")),
    ("Cloud Services", ("cloud services", "cloud computing", "cloud")),
    ("Data Analytics", ("data analytics", "big data", "analytics", "business intelligence")),
    ("Business Consulting", ("business consulting", "management consulting", "strategy consulting")),
    ("Outsourcing", ("outsourcing", "externalisation", "bpo")),
)

COUNTRY_KEYWORDS: KeywordTable = (
    ("France", ("france", "french", "français", "française", "paris", "lyon", "grenoble")),
    ("United States", ("usa", "u.s.", "united states", "america", "american", "new york")),
    ("United Kingdom", ("uk", "united kingdom", "britain", "british", "england", "london")),
    ("Germany", ("germany", "german", "deutschland", "berlin", "munich")),
    ("India", ("india", "indian", "bangalore", "mumbai")),
    ("China", ("china", "chinese", "beijing", "shanghai")),
    ("Japan", ("japan", "japanese", "tokyo")),
)

COUNTRY_REGIONS: dict[str, str] = {
    "France": "Europe",
    "United Kingdom": "Europe",
    "Germany": "Europe",
    "Spain": "Europe",
    "Italy": "Europe",
    "United States": "North America",
    "Canada": "North America",
    "India": "Asia",
    "China": "Asia",
    "Japan": "Asia",
    "Singapore": "Asia",
}

BUSINESS_MODEL_KEYWORDS: KeywordTable = (
    ("B2B Services", ("b2b", "business to business", "business-to-business", "services aux entreprises")),
    ("SaaS", ("saas", "software as a service", "subscription software")),
    ("Consulting", ("consulting", "conseil", "advisory")),
)

ACTIVITY_KEYWORDS: KeywordTable = (
    ("Digital Transformation", ("digital transformation", "transformation digitale", "transformation numérique")),
    ("IT Consulting", ("it consulting", "conseil informatique", "technology consulting")),
    ("Cloud Services", ("cloud",)),
    ("Data Analytics", ("data analytics", "big data", "analytics", "data")),
    ("Cybersecurity", ("cybersecurity", "cybersécurité", "cyber security")),
    ("Outsourcing", ("outsourcing", "externalisation")),
)

COMPETITOR_NAMES: KeywordTable = (
    ("Accenture", ("accenture",)),
    ("Deloitte", ("deloitte",)),
    ("IBM", ("ibm",)),
    ("TCS", ("tcs", "tata consultancy")),
    ("Infosys", ("infosys",)),
    ("Wipro", ("wipro",)),
    ("Atos", ("atos",)),
    ("Capgemini", ("capgemini",)),
    ("Cognizant", ("cognizant",)),
    ("Sopra Steria", ("sopra steria",)),
)

MARKET_POSITION_KEYWORDS: KeywordTable = (
    ("Leader", ("leader", "leading", "leader mondial", "market leader")),
    ("Major Player", ("top", "major", "majeur", "major player")),
)

SIZE_GUESS_KEYWORDS: KeywordTable = (
    ("large", ("multinational", "global", "fortune", "leader")),
    ("small", ("startup", "start-up", "small", "pme")),
)

PUBLIC_KEYWORDS: tuple[str, ...] = (
    "public",
    "stock",
    "nasdaq",
    "nyse",
    "euronext",
    "listed",
    "bourse",
)

EXCHANGES: KeywordTable = (
    ("NASDAQ", ("nasdaq",)),
    ("NYSE", ("nyse",)),
    ("EURONEXT", ("euronext",)),
)

CERTIFICATIONS: KeywordTable = (
    ("ISO", ("iso",)),
    ("CMMI", ("cmmi",)),
    ("SOC", ("soc", "soc 2")),
    ("GDPR", ("gdpr", "rgpd")),
    ("HIPAA", ("hipaa",)),
)

PARTNERS: KeywordTable = (
    ("Microsoft", ("microsoft",)),
    ("Google", ("google",)),
    ("Amazon", ("amazon", "aws")),
    ("Salesforce", ("salesforce",)),
    ("Oracle", ("oracle",)),
    ("SAP", ("sap",)),
)

LEADERSHIP_ROLES: KeywordTable = (
    ("CEO", ("ceo", "chief executive officer", "directeur général", "pdg")),
    ("CTO", ("cto", "chief technology officer", "directeur technique")),
    ("CFO", ("cfo", "chief financial officer", "directeur financier")),
    ("Chairman", ("chairman", "chairwoman", "président", "présidente")),
)

KNOWN_CITIES: tuple[str, ...] = (
    "Paris",
    "London",
    "New York",
    "Tokyo",
    "Berlin",
    "Madrid",
    "Rome",
    "Amsterdam",
    "Brussels",
    "Geneva",
    "Zurich",
    "Milan",
    "Dublin",
    "Stockholm",
    "Copenhagen",
    "Mumbai",
    "Bangalore",
    "Singapore",
    "Hong Kong",
    "Sydney",
    "Toronto",
    "Montreal",
)

PROFILE_SKIP_DOMAINS: tuple[str, ...] = ("linkedin", "wikipedia")
WEBSITE_SKIP_DOMAINS: tuple[str, ...] = (
    "linkedin",
    "wikipedia",
    "google",
    "yahoo",
    "facebook",
    "twitter",
    "x.com",
    "youtube",
)


@lru_cache(maxsize=512)
def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Whole-word, case-insensitive pattern for a keyword or phrase."""
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", flags=re.IGNORECASE)


def keyword_present(text: str, keyword: str) -> bool:
    return keyword_pattern(keyword).search(text) is not None


def count_hits(text: str, keywords: tuple[str, ...]) -> int:
    return sum(1 for keyword in keywords if keyword_present(text, keyword))


def best_keyword_group(
    text: str,
    table: KeywordTable,
    rule: MatchRule = MatchRule.COUNT,
    default: str | None = None,
) -> str | None:
    """Return the label of the best matching group, or `default`.

    COUNT picks the group with the most distinct keyword hits, ties going to
    the earlier group. FIRST returns the first group with any hit.
    """
    best_label: str | None = None
    best_hits = 0
    for label, keywords in table:
        hits = count_hits(text, keywords)
        if rule is MatchRule.FIRST and hits:
            return label
        if hits > best_hits:
            best_label, best_hits = label, hits
    return best_label if best_label is not None else default


def matching_labels(text: str, table: KeywordTable, limit: int | None = None) -> list[str]:
    """Return every label with at least one hit, in table order."""
    labels = [label for label, keywords in table if count_hits(text, keywords)]
    return labels[:limit] if limit is not None else labels
