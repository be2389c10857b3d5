"""Financial health metrics and peer benchmark scores."""

from __future__ import annotations

from datetime import datetime, timezone

from company_intel.config import settings
from company_intel.models.analysis import BenchmarkScores, FinancialMetrics, Productivity
from company_intel.models.company import CompanyProfile
from company_intel.services.extraction.fields import parse_revenue_millions

# (minimum revenue per employee, productivity, health points), checked top-down.
PRODUCTIVITY_BANDS: tuple[tuple[float, Productivity, int], ...] = (
    (300_000, Productivity.VERY_HIGH, 30),
    (150_000, Productivity.HIGH, 25),
    (80_000, Productivity.MEDIUM, 15),
)
LOW_PRODUCTIVITY_POINTS = 5

GROWTH_STAGES: tuple[tuple[int, str], ...] = (
    (3, "startup"),
    (7, "growth"),
    (15, "expansion"),
    (25, "mature"),
)

PRODUCTIVITY_BENCHMARK: dict[Productivity, int] = {
    Productivity.VERY_HIGH: 95,
    Productivity.HIGH: 80,
    Productivity.MEDIUM: 60,
    Productivity.LOW: 30,
    Productivity.UNKNOWN: 50,
}


def current_year() -> int:
    return datetime.now(timezone.utc).year


def company_age(profile: CompanyProfile, year: int | None = None) -> int | None:
    if profile.founding_year is None:
        return None
    return (year or current_year()) - profile.founding_year


def revenue_per_employee(profile: CompanyProfile) -> float | None:
    millions = parse_revenue_millions(profile.revenue)
    if millions is None or not profile.employees:
        return None
    return millions * 1_000_000 / profile.employees


def classify_productivity(per_employee: float | None) -> tuple[Productivity, int]:
    if per_employee is None:
        return Productivity.UNKNOWN, 0
    for threshold, productivity, points in PRODUCTIVITY_BANDS:
        if per_employee > threshold:
            return productivity, points
    return Productivity.LOW, LOW_PRODUCTIVITY_POINTS


def growth_potential(age: int | None, employees: int | None) -> int:
    if age is None:
        return 0
    staff = employees or 0
    if age < 10 and staff > 100:
        return 85
    if age < 20 and staff > 500:
        return 70
    return 50


def stability_score(profile: CompanyProfile, age: int | None) -> int:
    score = 50
    if age is not None and age > 10:
        score += 20
        if age > 25:
            score += 10
    if (profile.employees or 0) > 500:
        score += 15
    if profile.is_public:
        score += 10
    if profile.confidence > 0.8:
        score += 5
    return min(score, 100)


def growth_stage(age: int | None) -> str:
    if age is None:
        return "unknown"
    for limit, stage in GROWTH_STAGES:
        if age < limit:
            return stage
    return "established"


def market_presence(profile: CompanyProfile, home_country: str) -> str:
    points = 0
    if profile.website:
        points += 20
    if profile.is_public:
        points += 30
    if (profile.employees or 0) > 1000:
        points += 25
    if profile.country and profile.country != home_country:
        points += 15
    if profile.headquarters:
        points += 10
    if points >= 80:
        return "strong"
    if points >= 50:
        return "moderate"
    return "limited"


def scalability_index(profile: CompanyProfile, age: int | None) -> int:
    index = 50
    if profile.sector == "Technology":
        index += 20
    if profile.is_public:
        index += 15
    if age is not None and age < 10:
        index += 10
    return min(index, 100)


def calculate_financial_metrics(
    profile: CompanyProfile,
    *,
    year: int | None = None,
    home_country: str | None = None,
) -> FinancialMetrics:
    """Derive productivity, growth and stability signals from a profile."""
    age = company_age(profile, year)
    per_employee = revenue_per_employee(profile)
    productivity, health_points = classify_productivity(per_employee)
    potential = growth_potential(age, profile.employees)
    stability = stability_score(profile, age)
    health = min(health_points + potential * 0.3 + stability * 0.4, 100)
    return FinancialMetrics(
        revenue_per_employee=round(per_employee) if per_employee is not None else None,
        employee_productivity=productivity,
        growth_stage=growth_stage(age),
        market_presence=market_presence(profile, home_country or settings.home_country),
        scalability_index=scalability_index(profile, age),
        overall_health_score=round(health),
        growth_potential=potential,
        stability_score=stability,
    )


def calculate_benchmark_scores(
    profile: CompanyProfile, reference: CompanyProfile
) -> BenchmarkScores:
    """Score a profile against the reference company on a 0-100 scale."""
    metrics = profile.financial_metrics or FinancialMetrics()
    size = 50
    if profile.employees and reference.employees:
        size = round(min(max(profile.employees / reference.employees * 50, 10), 100))
    productivity = PRODUCTIVITY_BENCHMARK[metrics.employee_productivity]
    growth = metrics.growth_potential or 50
    stability = metrics.stability_score or 50
    overall = size * 0.2 + productivity * 0.3 + growth * 0.25 + stability * 0.25
    return BenchmarkScores(
        size=size,
        productivity=productivity,
        growth=growth,
        stability=stability,
        overall=round(overall),
    )
