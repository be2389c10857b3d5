"""Multi-factor valuation from sector revenue and headcount multiples."""

from __future__ import annotations

from dataclasses import dataclass

from company_intel.models.analysis import (
    FinancialMetrics,
    Productivity,
    RiskLevel,
    RiskProfile,
    ValuationEstimate,
    ValuationEstimates,
    ValueRange,
)
from company_intel.models.company import CompanyProfile
from company_intel.services.extraction.fields import parse_revenue_millions
from company_intel.utils.text import format_currency


@dataclass(frozen=True)
class SectorMultiples:
    revenue_min: float
    revenue_avg: float
    revenue_max: float
    employee_min: int
    employee_avg: int
    employee_max: int


SECTOR_MULTIPLES: dict[str, SectorMultiples] = {
    "Technology": SectorMultiples(3.0, 5.5, 8.0, 120_000, 180_000, 250_000),
    "Finance": SectorMultiples(1.8, 2.8, 4.0, 100_000, 140_000, 180_000),
    "Healthcare": SectorMultiples(2.2, 3.5, 5.0, 110_000, 150_000, 200_000),
    "Consulting": SectorMultiples(1.5, 2.5, 3.5, 80_000, 120_000, 160_000),
}
DEFAULT_MULTIPLES_SECTOR = "Technology"

PRODUCTIVITY_ADJUSTMENTS: dict[Productivity, float] = {
    Productivity.VERY_HIGH: 1.3,
    Productivity.HIGH: 1.15,
    Productivity.LOW: 0.85,
}
RISK_ADJUSTMENTS: dict[RiskLevel, float] = {
    RiskLevel.HIGH: 0.8,
    RiskLevel.LOW: 1.1,
}


def _growth_adjustment(potential: int) -> float | None:
    if potential > 80:
        return 1.2
    if potential < 40:
        return 0.9
    return None


def estimate_valuation(
    profile: CompanyProfile,
    metrics: FinancialMetrics | None = None,
    risk: RiskProfile | None = None,
) -> ValuationEstimate:
    """Estimate enterprise value in euros.

    Revenue drives the conservative/average/optimistic estimates and headcount
    drives the employee-based one; each estimate is then scaled by the
    productivity, growth and risk adjustments that apply.
    """
    metrics = metrics or profile.financial_metrics
    risk = risk or profile.risk_profile
    multiples = SECTOR_MULTIPLES.get(profile.sector or "", SECTOR_MULTIPLES[DEFAULT_MULTIPLES_SECTOR])
    factors: list[str] = []
    adjustments: list[str] = []
    estimates: dict[str, float] = {}

    revenue_millions = parse_revenue_millions(profile.revenue)
    if revenue_millions is not None:
        revenue = revenue_millions * 1_000_000
        estimates["conservative"] = revenue * multiples.revenue_min
        estimates["average"] = revenue * multiples.revenue_avg
        estimates["optimistic"] = revenue * multiples.revenue_max
        factors.append(f"Revenue multiple {multiples.revenue_avg}x on {format_currency(revenue)}")
    if profile.employees:
        estimates["employee_based"] = profile.employees * multiples.employee_avg
        factors.append(f"{profile.employees} employees at {format_currency(multiples.employee_avg)} each")

    multiplier = 1.0
    if metrics is not None:
        productivity_factor = PRODUCTIVITY_ADJUSTMENTS.get(metrics.employee_productivity)
        if productivity_factor is not None:
            multiplier *= productivity_factor
            adjustments.append(f"Productivity {metrics.employee_productivity.value}: x{productivity_factor}")
        growth_factor = _growth_adjustment(metrics.growth_potential)
        if growth_factor is not None:
            multiplier *= growth_factor
            adjustments.append(f"Growth potential {metrics.growth_potential}: x{growth_factor}")
    if risk is not None:
        risk_factor = RISK_ADJUSTMENTS.get(risk.level)
        if risk_factor is not None:
            multiplier *= risk_factor
            adjustments.append(f"Risk level {risk.level.value}: x{risk_factor}")

    rounded = {key: round(value * multiplier) for key, value in estimates.items()}
    valuation = ValuationEstimate(
        confidence="medium" if profile.confidence > 0.7 else "low",
        estimates=ValuationEstimates(**rounded),
        factors=factors,
        adjustments=adjustments,
    )
    values = valuation.estimates.present()
    if values:
        valuation.recommended_value = round(sum(values) / len(values))
    if "conservative" in rounded and "optimistic" in rounded:
        valuation.value_range = ValueRange(min=rounded["conservative"], max=rounded["optimistic"])
    return valuation
