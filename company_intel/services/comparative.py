"""Aggregates scored profiles into rankings, insights and recommendations."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence

from company_intel.config import settings
from company_intel.models.analysis import (
    AnalysisStats,
    ComparativeAnalysis,
    ComparativeSummary,
    RankingEntry,
    Rankings,
    Recommendation,
    RiskLevel,
)
from company_intel.models.company import CompanyProfile
from company_intel.services.extraction.fields import parse_revenue_millions

ValueGetter = Callable[[CompanyProfile], float | None]


def _employees(profile: CompanyProfile) -> float | None:
    return profile.employees


def _revenue(profile: CompanyProfile) -> float | None:
    return parse_revenue_millions(profile.revenue)


def _health(profile: CompanyProfile) -> float | None:
    return profile.financial_metrics.overall_health_score if profile.financial_metrics else None


def _revenue_per_employee(profile: CompanyProfile) -> float | None:
    return profile.financial_metrics.revenue_per_employee if profile.financial_metrics else None


def _benchmark(profile: CompanyProfile) -> float | None:
    return profile.benchmark_scores.overall if profile.benchmark_scores else None


def _average(values: Sequence[float]) -> float | None:
    return sum(values) / len(values) if values else None


def rank_by(profiles: Sequence[CompanyProfile], getter: ValueGetter) -> list[RankingEntry]:
    """Descending ranking over profiles that carry a value."""
    valued = [(profile, getter(profile)) for profile in profiles]
    ordered = sorted(
        ((profile, value) for profile, value in valued if value is not None),
        key=lambda pair: pair[1],
        reverse=True,
    )
    return [
        RankingEntry(rank=index, name=profile.name, value=value)
        for index, (profile, value) in enumerate(ordered, start=1)
    ]


def _rank_of(ranking: Sequence[RankingEntry], name: str) -> int | None:
    return next((entry.rank for entry in ranking if entry.name == name), None)


def main_company(profiles: Sequence[CompanyProfile]) -> CompanyProfile | None:
    return next((profile for profile in profiles if profile.is_main_company), None)


class ComparativeAnalyzer:
    """Pure aggregation over already-scored profiles."""

    def __init__(self, *, max_recommendations: int | None = None) -> None:
        self._max_recommendations = max_recommendations or settings.max_recommendations

    def analyze(self, profiles: Sequence[CompanyProfile]) -> ComparativeAnalysis:
        employees = [value for value in map(_employees, profiles) if value is not None]
        revenues = [value for value in map(_revenue, profiles) if value is not None]
        average_employees = _average(employees)
        average_revenue = _average(revenues)
        summary = ComparativeSummary(
            total_companies=len(profiles),
            average_employees=round(average_employees) if average_employees is not None else None,
            average_revenue=round(average_revenue) if average_revenue is not None else None,
            sectors_represented=len({profile.sector for profile in profiles if profile.sector}),
            countries_represented=len({profile.country for profile in profiles if profile.country}),
        )
        rankings = Rankings(
            by_size=rank_by(profiles, _employees),
            by_revenue=rank_by(profiles, _revenue),
            by_health_score=rank_by(profiles, _health),
        )
        return ComparativeAnalysis(
            summary=summary,
            rankings=rankings,
            insights=self._insights(profiles, rankings),
        )

    def _insights(self, profiles: Sequence[CompanyProfile], rankings: Rankings) -> list[str]:
        main = main_company(profiles)
        if main is None:
            return []
        insights: list[str] = []
        if _rank_of(rankings.by_size, main.name) == 1:
            insights.append(f"{main.name} has the largest workforce in the group")
        if _rank_of(rankings.by_revenue, main.name) == 1:
            insights.append(f"{main.name} has the highest revenue in the group")
        health_rank = _rank_of(rankings.by_health_score, main.name)
        if health_rank is not None and health_rank <= 2:
            insights.append(f"{main.name} ranks in the top 2 for financial health")
        peers = [p for p in profiles if not p.is_main_company and p.sector and p.sector == main.sector]
        if peers:
            insights.append(f"{len(peers)} compared companies operate in the {main.sector} sector")
        return insights

    def recommendations(
        self, profiles: Sequence[CompanyProfile], analysis: ComparativeAnalysis
    ) -> list[Recommendation]:
        main = main_company(profiles)
        if main is None:
            return []
        items: list[Recommendation] = []

        health_rank = _rank_of(analysis.rankings.by_health_score, main.name)
        if health_rank is not None and health_rank > len(profiles) / 2:
            items.append(
                Recommendation(
                    type="performance",
                    priority="high",
                    title="Improve financial health",
                    description=f"Health score ranks #{health_rank} of {len(profiles)} companies",
                    actions=["Review cost structure", "Benchmark pricing against leaders"],
                )
            )

        average_employees = analysis.summary.average_employees
        if main.employees and average_employees and main.employees < average_employees * 0.5:
            items.append(
                Recommendation(
                    type="growth",
                    priority="medium",
                    title="Scale the workforce",
                    description="Headcount is below half of the peer average",
                    actions=["Plan targeted hiring", "Consider acquisitions or partnerships"],
                )
            )

        if main.risk_profile is not None and main.risk_profile.level is RiskLevel.HIGH:
            items.append(
                Recommendation(
                    type="risk",
                    priority="high",
                    title="Reduce risk exposure",
                    description=f"Risk score of {main.risk_profile.score}",
                    actions=list(main.risk_profile.mitigation),
                )
            )

        sector_peers = [
            profile
            for profile in profiles
            if not profile.is_main_company and profile.sector and profile.sector == main.sector
        ]
        peer_productivity = _average(
            [value for value in map(_revenue_per_employee, sector_peers) if value is not None]
        )
        own_productivity = _revenue_per_employee(main)
        if (
            len(sector_peers) >= 2
            and peer_productivity
            and own_productivity is not None
            and own_productivity < peer_productivity * 0.8
        ):
            items.append(
                Recommendation(
                    type="efficiency",
                    priority="medium",
                    title="Raise revenue per employee",
                    description="Productivity trails same-sector peers by more than 20%",
                    actions=["Automate delivery", "Shift mix toward higher-margin offerings"],
                )
            )

        if main.market_position_assessment is not None:
            for opportunity in main.market_position_assessment.opportunities:
                items.append(
                    Recommendation(
                        type="opportunity",
                        priority="low",
                        title="Market opportunity",
                        description=opportunity,
                    )
                )
        return items[: self._max_recommendations]

    def stats(self, profiles: Sequence[CompanyProfile]) -> AnalysisStats:
        sectors = Counter(profile.sector for profile in profiles if profile.sector)
        levels = Counter(profile.risk_profile.level.value for profile in profiles if profile.risk_profile)
        total_rated = sum(levels.values())
        return AnalysisStats(
            sector_distribution=dict(sectors),
            risk_distribution={
                level: round(count / total_rated * 100) for level, count in levels.items()
            },
            performance_ranking=rank_by(profiles, _benchmark),
        )
