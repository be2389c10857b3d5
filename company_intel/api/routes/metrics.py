"""Full financial metrics analysis for a company and its discovered peers."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends

from company_intel.api.dependencies import (
    get_comparable_finder,
    get_comparative_analyzer,
    get_profile_extractor,
    get_scoring_engine,
    get_search_client,
)
from company_intel.api.errors import reject_suspicious
from company_intel.api.lookup import build_metadata, lookup_profile
from company_intel.clients.searxng import SearxngClient
from company_intel.models.api import MetricsAnalysisRequest, MetricsAnalysisResponse
from company_intel.models.company import ComparableCandidate
from company_intel.services.comparables import ComparableFinder, build_peer_queries
from company_intel.services.comparative import ComparativeAnalyzer
from company_intel.services.extraction.profile import ExtractionVariant, ProfileExtractor
from company_intel.services.scoring.engine import ScoringEngine

router = APIRouter()
logger = logging.getLogger(__name__)

METHODOLOGY = {
    "financial_metrics": "Revenue per employee bands, company age and public listing signals",
    "risk": "Additive points for team size, productivity, age, data confidence and sector",
    "valuation": "Sector revenue and headcount multiples adjusted for productivity, growth and risk",
    "benchmarks": "Weighted size, productivity, growth and stability scores against the main company",
    "data_sources": "SearXNG web search results processed with keyword and pattern heuristics",
}


@router.post("/metrics/analyze", response_model=MetricsAnalysisResponse)
async def analyze_metrics(
    payload: MetricsAnalysisRequest,
    client: SearxngClient = Depends(get_search_client),
    extractor: ProfileExtractor = Depends(get_profile_extractor),
    finder: ComparableFinder = Depends(get_comparable_finder),
    engine: ScoringEngine = Depends(get_scoring_engine),
    analyzer: ComparativeAnalyzer = Depends(get_comparative_analyzer),
) -> MetricsAnalysisResponse:
    """Score the company, benchmark it against peers and recommend actions."""
    started = time.perf_counter()
    reject_suspicious(payload.company_name)
    lookup = await lookup_profile(
        client, extractor, payload.company_name, ExtractionVariant.METRICS, endpoint="analyze_metrics"
    )
    main = lookup.profile.enrich(is_main_company=True)

    peers: list[ComparableCandidate] = []
    peer_queries = 0
    if payload.include_comparables and payload.max_comparables > 0:
        peers = await finder.discover_peers(main, payload.max_comparables)
        peer_queries = len(build_peer_queries(main))

    scored_main = engine.enrich(main, peers=peers, reference=main)
    scored_peers = [
        engine.enrich(
            peer,
            peers=[main, *(other for other in peers if other is not peer)],
            reference=main,
        )
        for peer in peers
    ]
    profiles = [scored_main, *scored_peers]
    comparative = analyzer.analyze(profiles)

    logger.info(
        "metrics.analysis_complete",
        extra={"company": payload.company_name, "peers": len(scored_peers)},
    )
    return MetricsAnalysisResponse(
        main_company=scored_main,
        comparables=scored_peers,
        comparative_analysis=comparative,
        recommendations=analyzer.recommendations(profiles, comparative),
        analysis_stats=analyzer.stats(profiles),
        methodology=METHODOLOGY,
        metadata=build_metadata(
            started,
            endpoint="analyze_metrics",
            queries=lookup.bundle.total_queries + peer_queries,
            bundle=lookup.bundle,
        ),
    )
