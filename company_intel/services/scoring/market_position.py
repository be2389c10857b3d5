from __future__ import annotations

from collections.abc import Sequence

from company_intel.models.analysis import MarketPositionAssessment
from company_intel.models.company import CompanyProfile
from company_intel.services.extraction.fields import parse_revenue_millions
from company_intel.services.scoring.financials import company_age


def size_index(profile: CompanyProfile) -> float:
    """Combined size proxy: employees plus revenue (in €M) weighted by 100."""
    return (profile.employees or 0) + (parse_revenue_millions(profile.revenue) or 0) * 100


def _average(values: Sequence[float]) -> float | None:
    return sum(values) / len(values) if values else None


def assess_market_position(
    profile: CompanyProfile,
    peers: Sequence[CompanyProfile],
    *,
    year: int | None = None,
) -> MarketPositionAssessment:
    """Position a company relative to same-sector peers plus a light SWOT."""
    assessment = MarketPositionAssessment()

    sector_peers = [peer for peer in peers if peer.sector and peer.sector == profile.sector]
    peer_average = _average([size_index(peer) for peer in sector_peers])
    if peer_average:
        own = size_index(profile)
        if own > peer_average * 1.3:
            assessment.relative = "leader"
        elif own > peer_average:
            assessment.relative = "strong_player"
        elif own > peer_average * 0.7:
            assessment.relative = "average_player"
        else:
            assessment.relative = "challenger"

    employee_average = _average([peer.employees for peer in peers if peer.employees])
    if employee_average and profile.employees:
        ratio = profile.employees / employee_average
        if ratio > 1.5:
            assessment.strengths.append("Larger workforce than peer average")
        elif ratio < 0.5:
            assessment.weaknesses.append("Smaller workforce than peer average")

    age = company_age(profile, year)
    if age is not None:
        if age > 20:
            assessment.strengths.append("Established market presence")
        elif age < 5:
            assessment.opportunities.append("Agility and room for fast growth")
            assessment.threats.append("Limited track record against incumbents")

    if profile.is_public:
        assessment.strengths.append("Access to public capital markets")
        assessment.threats.append("Exposure to market volatility")
    return assessment
