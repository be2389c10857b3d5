"""Additive risk scoring over whatever profile fields are populated."""

from __future__ import annotations

from dataclasses import dataclass

from company_intel.models.analysis import (
    FinancialMetrics,
    Productivity,
    RiskAssessment,
    RiskLevel,
    RiskProfile,
)
from company_intel.models.company import CompanyProfile
from company_intel.services.scoring.financials import company_age

SECTOR_RISK_POINTS: dict[str, int] = {
    "Technology": 15,
    "Finance": 25,
    "Healthcare": 20,
    "Energy": 30,
    "Retail": 35,
}
HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40


@dataclass(frozen=True)
class _RiskFactor:
    points: int
    description: str
    mitigation: str


def _team_size_factor(employees: int | None) -> _RiskFactor | None:
    if employees is None:
        return None
    if employees < 10:
        return _RiskFactor(30, "Very small team", "Reduce key-person dependency and document processes")
    if employees < 50:
        return _RiskFactor(20, "Small team", "Plan hiring to strengthen core functions")
    return None


def _age_factor(age: int | None) -> _RiskFactor | None:
    if age is None:
        return None
    if age < 3:
        return _RiskFactor(35, "Very young company", "Validate business model traction and runway")
    if age > 50:
        return _RiskFactor(15, "Long-established company, possible inertia", "Review innovation and modernization plans")
    return None


def _collect_factors(
    profile: CompanyProfile, metrics: FinancialMetrics | None, year: int | None
) -> list[_RiskFactor]:
    factors: list[_RiskFactor | None] = [_team_size_factor(profile.employees)]
    if metrics is not None and metrics.employee_productivity is Productivity.LOW:
        factors.append(
            _RiskFactor(25, "Low employee productivity", "Improve operational efficiency and pricing")
        )
    factors.append(_age_factor(company_age(profile, year)))
    if profile.confidence < 0.6:
        factors.append(_RiskFactor(20, "Limited data confidence", "Confirm figures with primary sources"))
    sector_points = SECTOR_RISK_POINTS.get(profile.sector or "")
    if sector_points:
        factors.append(
            _RiskFactor(
                sector_points,
                f"{profile.sector} sector exposure",
                f"Monitor {profile.sector} market and regulatory trends",
            )
        )
    return [factor for factor in factors if factor is not None]


def risk_level(score: int) -> RiskLevel:
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_risk_profile(
    profile: CompanyProfile,
    metrics: FinancialMetrics | None = None,
    *,
    year: int | None = None,
) -> RiskProfile:
    """Sum per-factor points, cap at 100 and bucket into a risk level."""
    metrics = metrics or profile.financial_metrics
    factors = _collect_factors(profile, metrics, year)
    score = min(sum(factor.points for factor in factors), 100)
    low_productivity = metrics is not None and metrics.employee_productivity is Productivity.LOW
    return RiskProfile(
        level=risk_level(score),
        score=score,
        factors=[factor.description for factor in factors],
        mitigation=[factor.mitigation for factor in factors],
        assessment=RiskAssessment(
            operational="high" if score > 50 else "medium",
            financial="medium" if low_productivity else "low",
            market="medium" if profile.sector else "high",
            data="low" if profile.confidence > 0.7 else "medium",
        ),
    )
