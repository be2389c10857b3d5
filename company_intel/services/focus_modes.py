"""Focus modes bias generic web search toward a topical slant."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from company_intel.models.search import SearchOptions, SearchParams

DEFAULT_FOCUS_MODE = "companyResearch"
BOOST_KEYWORDS_PER_QUERY = 2


@dataclass(frozen=True)
class FocusMode:
    name: str
    engines: str
    categories: str
    boost_keywords: tuple[str, ...]
    description: str


FOCUS_MODES: Mapping[str, FocusMode] = MappingProxyType(
    {
        "financialSearch": FocusMode(
            name="financialSearch",
            engines="google,duckduckgo,yahoo",
            categories="general",
            boost_keywords=(
                "finance",
                "financial",
                "revenue",
                "earnings",
                "profit",
                "valuation",
                "chiffre d'affaires",
            ),
            description="Search tuned for financial information",
        ),
        "companyResearch": FocusMode(
            name="companyResearch",
            engines="google,duckduckgo",
            categories="general",
            boost_keywords=("company", "entreprise", "société", "business", "profile"),
            description="Company profile and business information",
        ),
        "marketAnalysis": FocusMode(
            name="marketAnalysis",
            engines="google,yahoo",
            categories="general",
            boost_keywords=("market", "marché", "sector", "secteur", "industry", "industrie"),
            description="Market and sector analysis",
        ),
        "competitorAnalysis": FocusMode(
            name="competitorAnalysis",
            engines="google,duckduckgo",
            categories="general",
            boost_keywords=(
                "competitor",
                "concurrence",
                "competitive",
                "comparison",
                "comparaison",
                "comparable",
            ),
            description="Competitive landscape and comparisons",
        ),
    }
)


def get_focus_mode(name: str) -> FocusMode:
    """Return the registered mode, raising ValueError on unknown names."""
    try:
        return FOCUS_MODES[name]
    except KeyError as exc:
        raise ValueError(f"Unknown focus mode: {name}") from exc


def keyword_hits(query: str, mode: FocusMode) -> int:
    lowered = query.lower()
    return sum(1 for keyword in mode.boost_keywords if keyword in lowered)


def detect_optimal_focus(query: str) -> str:
    """Pick the mode with the strictly highest keyword hit count.

    Ties and queries without any hit fall back to the default mode.
    """
    scores = {name: keyword_hits(query, mode) for name, mode in FOCUS_MODES.items()}
    best = max(scores.values())
    if best == 0:
        return DEFAULT_FOCUS_MODE
    leaders = [name for name, score in scores.items() if score == best]
    if len(leaders) > 1:
        return DEFAULT_FOCUS_MODE
    return leaders[0]


def apply_search_focus(params: SearchParams, mode_name: str) -> SearchParams:
    """Return params with the mode's engines/categories and boosted query text.

    Engines and categories are overwritten, so reapplying a mode is stable on
    them, while every application appends boost keywords to the query again.
    """
    mode = get_focus_mode(mode_name)
    boost = " ".join(mode.boost_keywords[:BOOST_KEYWORDS_PER_QUERY])
    return params.model_copy(
        update={
            "q": f"{params.q} {boost}".strip(),
            "engines": mode.engines,
            "categories": mode.categories,
        }
    )


def build_search_params(
    query: str, options: SearchOptions | None, *, default_language: str
) -> SearchParams:
    options = options or SearchOptions()
    return SearchParams(
        q=query,
        categories=options.categories or "general",
        engines=options.engines or "",
        lang=options.language or default_language,
        pageno=options.page,
    )
