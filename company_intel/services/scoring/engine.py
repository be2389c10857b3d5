"""Entry point tying together similarity and the derived scoring stages."""

from __future__ import annotations

from collections.abc import Sequence

from company_intel.config import settings
from company_intel.models.company import ComparableCandidate, CompanyProfile
from company_intel.services.scoring.financials import (
    calculate_benchmark_scores,
    calculate_financial_metrics,
)
from company_intel.services.scoring.market_position import assess_market_position
from company_intel.services.scoring.risk import calculate_risk_profile
from company_intel.services.scoring.similarity import (
    calculate_similarity,
    candidate_risk_factors,
    match_reasons,
)
from company_intel.services.scoring.valuation import estimate_valuation


class ScoringEngine:
    """Stateless scorer; every method returns new profile copies."""

    def __init__(self, *, home_country: str | None = None, year: int | None = None) -> None:
        self._home_country = home_country or settings.home_country
        self._year = year

    def score(self, reference: CompanyProfile, candidate: CompanyProfile) -> int:
        return calculate_similarity(reference, candidate)

    def score_candidate(
        self, reference: CompanyProfile, candidate: ComparableCandidate
    ) -> ComparableCandidate:
        similarity = self.score(reference, candidate)
        return candidate.model_copy(
            update={
                "similarity_score": similarity,
                "match_reasons": match_reasons(reference, candidate, similarity),
                "risk_factors": candidate_risk_factors(candidate),
            }
        )

    def enrich(
        self,
        profile: CompanyProfile,
        *,
        peers: Sequence[CompanyProfile] = (),
        reference: CompanyProfile | None = None,
    ) -> CompanyProfile:
        """Attach financial metrics, risk, valuation, market position and benchmarks."""
        metrics = calculate_financial_metrics(profile, year=self._year, home_country=self._home_country)
        risk = calculate_risk_profile(profile, metrics, year=self._year)
        enriched = profile.enrich(
            financial_metrics=metrics,
            risk_profile=risk,
            valuation_estimate=estimate_valuation(profile, metrics, risk),
            market_position_assessment=assess_market_position(profile, peers, year=self._year),
        )
        return enriched.enrich(
            benchmark_scores=calculate_benchmark_scores(enriched, reference or enriched)
        )
