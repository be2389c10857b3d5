from __future__ import annotations

from company_intel.models.analysis import (
    BenchmarkScores,
    FinancialMetrics,
    MarketPositionAssessment,
    RiskAssessment,
    RiskLevel,
    RiskProfile,
)
from company_intel.models.company import CompanyProfile
from company_intel.services.comparative import ComparativeAnalyzer, rank_by


def _risk(level: RiskLevel) -> RiskProfile:
    return RiskProfile(
        level=level,
        score=80 if level is RiskLevel.HIGH else 20,
        mitigation=["Diversify revenue"],
        assessment=RiskAssessment(operational="high", financial="low", market="medium", data="low"),
    )


def _company(name: str, *, employees: int, revenue: str, health: int, rpe: int, **extra) -> CompanyProfile:
    return CompanyProfile(
        name=name,
        source="web_search_metrics",
        confidence=0.7,
        sector=extra.pop("sector", "Technology"),
        country=extra.pop("country", "France"),
        employees=employees,
        revenue=revenue,
        financial_metrics=FinancialMetrics(overall_health_score=health, revenue_per_employee=rpe),
        benchmark_scores=BenchmarkScores(overall=health),
        risk_profile=extra.pop("risk", _risk(RiskLevel.LOW)),
        **extra,
    )


def _group() -> list[CompanyProfile]:
    return [
        _company(
            "Acme",
            employees=40,
            revenue="€4M",
            health=30,
            rpe=100_000,
            is_main_company=True,
            risk=_risk(RiskLevel.HIGH),
            market_position_assessment=MarketPositionAssessment(
                opportunities=["Agility and room for fast growth"]
            ),
        ),
        _company("Globex", employees=500, revenue="€100M", health=70, rpe=200_000),
        _company("Initech", employees=300, revenue="€60M", health=60, rpe=200_000, country="Germany"),
    ]


def test_rank_by_skips_missing_values():
    profiles = [
        CompanyProfile(name="A", source="s", employees=10),
        CompanyProfile(name="B", source="s"),
        CompanyProfile(name="C", source="s", employees=30),
    ]

    ranking = rank_by(profiles, lambda profile: profile.employees)

    assert [(entry.rank, entry.name) for entry in ranking] == [(1, "C"), (2, "A")]


def test_analyze_summarizes_and_ranks():
    analysis = ComparativeAnalyzer().analyze(_group())

    assert analysis.summary.total_companies == 3
    assert analysis.summary.average_employees == 280
    assert analysis.summary.average_revenue == 55
    assert analysis.summary.countries_represented == 2
    assert [entry.name for entry in analysis.rankings.by_size] == ["Globex", "Initech", "Acme"]
    assert analysis.rankings.by_health_score[0].name == "Globex"
    assert "2 compared companies operate in the Technology sector" in analysis.insights


def test_recommendations_flag_weak_main_company():
    profiles = _group()
    analyzer = ComparativeAnalyzer(max_recommendations=8)

    recommendations = analyzer.recommendations(profiles, analyzer.analyze(profiles))

    assert [item.type for item in recommendations] == [
        "performance",
        "growth",
        "risk",
        "efficiency",
        "opportunity",
    ]
    assert recommendations[2].actions == ["Diversify revenue"]


def test_recommendations_are_capped():
    profiles = _group()
    analyzer = ComparativeAnalyzer(max_recommendations=2)

    assert len(analyzer.recommendations(profiles, analyzer.analyze(profiles))) == 2


def test_stats_distributions():
    stats = ComparativeAnalyzer().stats(_group())

    assert stats.sector_distribution == {"Technology": 3}
    assert stats.risk_distribution == {"high": 33, "low": 67}
    assert [entry.name for entry in stats.performance_ranking] == ["Globex", "Initech", "Acme"]


def test_no_main_company_means_no_insights():
    profiles = [profile.enrich(is_main_company=False) for profile in _group()]
    analyzer = ComparativeAnalyzer()

    analysis = analyzer.analyze(profiles)

    assert analysis.insights == []
    assert analyzer.recommendations(profiles, analysis) == []
