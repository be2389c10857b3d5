"""Pure text -> value heuristics used to build company profiles.

Each function takes already-aggregated search text and returns the extracted
value or None. Functions documented as case-sensitive expect the original
text; everything else lowercases internally.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime, timezone
from urllib.parse import urlparse

from company_intel.models.company import FundingInfo, Leader
from company_intel.models.search import SearchResultItem
from company_intel.services.extraction.taxonomy import (
    ACTIVITY_KEYWORDS,
    BUSINESS_MODEL_KEYWORDS,
    CERTIFICATIONS,
    COMPETITOR_NAMES,
    COUNTRY_KEYWORDS,
    COUNTRY_REGIONS,
    EXCHANGES,
    INDUSTRY_KEYWORDS,
    KNOWN_CITIES,
    LEADERSHIP_ROLES,
    MARKET_POSITION_KEYWORDS,
    PARTNERS,
    PROFILE_SKIP_DOMAINS,
    PUBLIC_KEYWORDS,
    SECTOR_KEYWORDS,
    SIZE_GUESS_KEYWORDS,
    WEBSITE_SKIP_DOMAINS,
    MatchRule,
    best_keyword_group,
    keyword_present,
    matching_labels,
)
from company_intel.utils.text import is_valid_url

MIN_EMPLOYEES = 1
MAX_EMPLOYEES = 5_000_000
MIN_REVENUE_MILLIONS = 1
MAX_REVENUE_MILLIONS = 1_000_000
EARLIEST_FOUNDING_YEAR = 1800

_EMPLOYEE_WORDS = r"(?:employees|employés|salariés|people|personnes|staff|collaborateurs)"
_GROUPED_NUMBER = r"\d{1,3}(?:[,\s]\d{3})+"

# (pattern, multiplier) in priority order.
EMPLOYEE_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(rf"\b({_GROUPED_NUMBER})\s*\+?\s*{_EMPLOYEE_WORDS}"), 1),
    (re.compile(rf"\b(\d{{1,3}}(?:\.\d+)?)\s*k\+?\s*{_EMPLOYEE_WORDS}"), 1000),
    (re.compile(rf"workforce\D{{0,40}}?({_GROUPED_NUMBER}|\d+)"), 1),
    (re.compile(rf"emploie\D{{0,20}}?({_GROUPED_NUMBER}|\d+)\s*personnes"), 1),
    (re.compile(rf"(?<![\d,.])(?<!\d\s)\b(\d{{2,6}})\s*{_EMPLOYEE_WORDS}"), 1),
)

_AMOUNT = r"(\d+(?:[.,]\d+)?)"
_BILLIONS = r"(?:milliards?|billions?|bn)\b"
_MILLIONS = r"(?:millions?|mn|m)\b"
_REVENUE_WORDS = r"(?:revenues?|turnover|sales|\bca\b)"

REVENUE_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(rf"chiffre d'affaires\D{{0,40}}?{_AMOUNT}\s*{_BILLIONS}"), 1000),
    (re.compile(rf"chiffre d'affaires\D{{0,40}}?{_AMOUNT}\s*{_MILLIONS}"), 1),
    (re.compile(rf"{_REVENUE_WORDS}\D{{0,40}}?{_AMOUNT}\s*{_BILLIONS}"), 1000),
    (re.compile(rf"{_REVENUE_WORDS}\D{{0,40}}?{_AMOUNT}\s*{_MILLIONS}"), 1),
)

FOUNDING_YEAR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:founded|created|established|créée?|fondée?)\D{0,30}?\b(?:in|en)\s+(\d{4})\b"),
    re.compile(r"\b(?:depuis|since)\s+(\d{4})\b"),
    re.compile(r"(?:création|foundation|fondation)\D{0,15}?(\d{4})\b"),
    re.compile(r"\((\d{4})\)"),
    re.compile(r"company\D{0,30}?founded\D{0,15}?(\d{4})\b"),
    re.compile(r"\ben\s+(\d{4})\b"),
)

_CITY = r"([A-Z][\w'-]+(?:\s+[A-Z][\w'-]+){0,2})"
HEADQUARTERS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        rf"(?i:headquartered|headquarters|head office|siège social|siège)[^.\n]{{0,20}}?"
        rf"(?i:\bin\b|\bà\b|\ben\b|:)\s*{_CITY}"
    ),
    re.compile(rf"(?i:based in|basée? à)\s+{_CITY}"),
    re.compile(rf"\b\d{{1,4}},?\s+(?i:rue|avenue|boulevard|street)\b[^,\n]{{0,60}},?\s+\d{{5}}\s+{_CITY}"),
    re.compile(rf"{_CITY},\s*[A-Z][a-zA-Z]+"),
)

_PERSON = r"([A-Z][a-zà-ÿ'-]+\s+[A-Z][a-zà-ÿ'-]+)"
_CITY_LOOKUP = {city.lower(): city for city in KNOWN_CITIES}

MARKET_SHARE_PATTERN = re.compile(r"(?:market share|part de marché)\D{0,30}?(\d+(?:[.,]\d+)?)\s*%")
GROWTH_RATE_PATTERN = re.compile(r"(?:growth|croissance)\D{0,30}?(\d+(?:[.,]\d+)?)\s*%")
SUBSIDIARY_PATTERN = re.compile(r"(?i:subsidiary|subsidiaries|filiale|filiales)\s+(?i:of\s+|de\s+)?([A-Z][\w&'-]+(?:\s+[A-Z][\w&'-]+){0,2})")
REVENUE_STRING_PATTERN = re.compile(r"€?\s*(\d+(?:[.,]\d+)?)\s*M", flags=re.IGNORECASE)


def parse_decimal(token: str) -> float:
    """Parse "1,200", "22,5" or "22.5" style numbers."""
    cleaned = token.strip()
    if "," in cleaned and "." not in cleaned:
        if re.fullmatch(r"\d{1,3}(?:,\d{3})+", cleaned):
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")
    return float(cleaned)


def extract_sector(text: str, default: str | None = None) -> str | None:
    return best_keyword_group(text, SECTOR_KEYWORDS, MatchRule.COUNT, default)


def extract_industry(text: str) -> str | None:
    return best_keyword_group(text, INDUSTRY_KEYWORDS, MatchRule.FIRST)


def extract_country(text: str) -> str | None:
    return best_keyword_group(text, COUNTRY_KEYWORDS, MatchRule.FIRST)


def region_for_country(country: str | None, default: str) -> str:
    if not country:
        return default
    return COUNTRY_REGIONS.get(country, default)


def extract_business_model(text: str) -> str | None:
    return best_keyword_group(text, BUSINESS_MODEL_KEYWORDS, MatchRule.FIRST)


def extract_main_activities(text: str, limit: int = 5) -> list[str]:
    return matching_labels(text, ACTIVITY_KEYWORDS, limit)


def extract_competitors(text: str) -> list[str]:
    return matching_labels(text, COMPETITOR_NAMES)


def extract_market_position(text: str) -> str | None:
    return best_keyword_group(text, MARKET_POSITION_KEYWORDS, MatchRule.FIRST)


def extract_employee_count(text: str) -> int | None:
    """Return the first plausible headcount, trying patterns in priority order."""
    lowered = text.lower()
    for pattern, multiplier in EMPLOYEE_PATTERNS:
        match = pattern.search(lowered)
        if not match:
            continue
        raw = re.sub(r"[,\s]", "", match.group(1))
        try:
            value = int(float(raw) * multiplier)
        except ValueError:
            continue
        if MIN_EMPLOYEES <= value <= MAX_EMPLOYEES:
            return value
    return None


def extract_revenue_millions(text: str) -> float | None:
    """Return revenue in millions of euros from the first plausible mention."""
    lowered = text.lower()
    for pattern, multiplier in REVENUE_PATTERNS:
        match = pattern.search(lowered)
        if not match:
            continue
        try:
            amount = parse_decimal(match.group(1)) * multiplier
        except ValueError:
            continue
        if MIN_REVENUE_MILLIONS <= amount <= MAX_REVENUE_MILLIONS:
            return amount
    return None


def format_revenue(millions: float) -> str:
    return f"€{round(millions)}M"


def extract_revenue(text: str) -> str | None:
    millions = extract_revenue_millions(text)
    return format_revenue(millions) if millions is not None else None


def parse_revenue_millions(revenue: str | None) -> float | None:
    """Invert `format_revenue`: "€350M" -> 350.0."""
    if not revenue:
        return None
    match = REVENUE_STRING_PATTERN.search(revenue)
    if not match:
        return None
    return parse_decimal(match.group(1))


def categorize_employees(employees: int | None) -> str | None:
    if employees is None:
        return None
    if employees < 50:
        return "small"
    if employees < 1000:
        return "medium"
    if employees < 10000:
        return "large"
    return "enterprise"


def categorize_revenue(millions: float | None) -> str | None:
    if millions is None:
        return None
    if millions < 10:
        return "small"
    if millions < 100:
        return "medium"
    if millions < 1000:
        return "large"
    return "enterprise"


def guess_size_category(text: str, default: str | None = "medium") -> str | None:
    return best_keyword_group(text, SIZE_GUESS_KEYWORDS, MatchRule.FIRST, default)


def extract_founding_year(text: str, current_year: int | None = None) -> int | None:
    """Return the earliest plausible year found by any founding pattern."""
    lowered = text.lower()
    latest = current_year or datetime.now(timezone.utc).year
    years = [
        int(year)
        for pattern in FOUNDING_YEAR_PATTERNS
        for year in pattern.findall(lowered)
        if EARLIEST_FOUNDING_YEAR <= int(year) <= latest
    ]
    return min(years) if years else None


def _known_city(candidate: str) -> str | None:
    tokens = candidate.split()
    for size in range(len(tokens), 0, -1):
        city = _CITY_LOOKUP.get(" ".join(tokens[:size]).lower())
        if city:
            return city
    return None


def extract_headquarters(text: str) -> str | None:
    """Return a known city named as headquarters. Case-sensitive."""
    for pattern in HEADQUARTERS_PATTERNS:
        for match in pattern.finditer(text):
            city = _known_city(match.group(1))
            if city:
                return city
    return None


def extract_leadership(text: str) -> list[Leader]:
    """Capture one capitalized two-token name per role. Case-sensitive."""
    leaders: list[Leader] = []
    for role, keywords in LEADERSHIP_ROLES:
        alternation = "|".join(re.escape(keyword) for keyword in keywords)
        pattern = re.compile(rf"(?i:(?<!\w)(?:{alternation})(?!\w))[^.\n]{{0,40}}?{_PERSON}")
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if 3 <= len(name) <= 50:
                leaders.append(Leader(role=role, name=name))
    return leaders


def guess_is_public(text: str) -> bool:
    return any(keyword_present(text, keyword) for keyword in PUBLIC_KEYWORDS)


def extract_exchange(text: str) -> str | None:
    return best_keyword_group(text, EXCHANGES, MatchRule.FIRST)


def extract_funding_info(text: str) -> FundingInfo | None:
    if keyword_present(text, "public") and keyword_present(text, "stock"):
        return FundingInfo(type="Public", exchange=extract_exchange(text))
    return None


def extract_market_share(text: str) -> float | None:
    match = MARKET_SHARE_PATTERN.search(text.lower())
    if not match:
        return None
    share = parse_decimal(match.group(1))
    return share if 1 <= share <= 100 else None


def extract_growth_rate(text: str) -> float | None:
    match = GROWTH_RATE_PATTERN.search(text.lower())
    if not match:
        return None
    rate = parse_decimal(match.group(1))
    return rate if 0 <= rate <= 500 else None


def extract_profitability(text: str) -> str:
    if keyword_present(text, "profitable") or keyword_present(text, "profit"):
        return "profitable"
    if keyword_present(text, "loss") or keyword_present(text, "perte"):
        return "loss_making"
    return "unknown"


def extract_certifications(text: str) -> list[str]:
    return matching_labels(text, CERTIFICATIONS)


def extract_partnerships(text: str, limit: int = 5) -> list[str]:
    return matching_labels(text, PARTNERS, limit)


def extract_subsidiaries(text: str, limit: int = 5) -> list[str]:
    """Names introduced as a subsidiary. Case-sensitive."""
    names: list[str] = []
    for match in SUBSIDIARY_PATTERN.finditer(text):
        name = match.group(1).strip()
        if name not in names:
            names.append(name)
        if len(names) >= limit:
            break
    return names


def create_description(results: Sequence[SearchResultItem], max_length: int = 300) -> str | None:
    """First informative snippet, skipping social and encyclopedia pages."""
    if not results:
        return None
    for item in results:
        if len(item.content) > 100 and not any(domain in item.url for domain in PROFILE_SKIP_DOMAINS):
            return f"{item.content[:max_length]}..."
    first = results[0].content
    return f"{first[:max_length]}..." if first else None


def extract_website(results: Sequence[SearchResultItem], company_name: str | None = None) -> str | None:
    """Prefer a result domain that contains the company's first name token."""
    candidates: list[str] = []
    for item in results:
        if not is_valid_url(item.url):
            continue
        host = urlparse(item.url).netloc.lower()
        if any(domain in host for domain in WEBSITE_SKIP_DOMAINS):
            continue
        candidates.append(f"{urlparse(item.url).scheme}://{host}")
    if not candidates:
        return None
    tokens = company_name.lower().split() if company_name else []
    token = re.sub(r"[^a-z0-9]", "", tokens[0]) if tokens else ""
    if len(token) >= 3:
        for site in candidates:
            if token in urlparse(site).netloc:
                return site
    for site in candidates:
        if site.endswith(".com"):
            return site
    return None


def extract_key_points(results: Sequence[SearchResultItem], limit: int = 5) -> list[str]:
    return [item.title for item in results if 5 < len(item.title) < 100][:limit]
