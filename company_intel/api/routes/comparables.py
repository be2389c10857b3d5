"""Comparable company discovery endpoint."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends

from company_intel.api.dependencies import (
    get_comparable_finder,
    get_profile_extractor,
    get_search_client,
)
from company_intel.api.errors import not_found_error, reject_suspicious
from company_intel.api.lookup import build_metadata, lookup_profile
from company_intel.clients.searxng import SearxngClient
from company_intel.models.api import ComparablesRequest, ComparablesResponse
from company_intel.services.comparables import (
    ComparableFinder,
    results_quality,
    summarize_breakdown,
)
from company_intel.services.extraction.profile import ExtractionVariant, ProfileExtractor

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/comparables", response_model=ComparablesResponse)
async def find_comparables(
    payload: ComparablesRequest,
    client: SearxngClient = Depends(get_search_client),
    extractor: ProfileExtractor = Depends(get_profile_extractor),
    finder: ComparableFinder = Depends(get_comparable_finder),
) -> ComparablesResponse:
    """Profile the reference company, then rank similar companies."""
    started = time.perf_counter()
    reject_suspicious(payload.company_name)
    lookup = await lookup_profile(
        client, extractor, payload.company_name, ExtractionVariant.BASIC, endpoint="find_comparables"
    )
    reference = lookup.profile.enrich(is_main_company=True)

    found = await finder.find_comparables(
        reference,
        max_results=payload.max_results,
        min_similarity=payload.min_similarity,
        prefer_same_country=payload.prefer_same_country,
    )
    if not found.comparables:
        raise not_found_error(
            f"No comparable companies found for {payload.company_name}",
            [
                "Lower the minimum similarity threshold",
                "Disable the same-country preference",
                "Try a more specific sector or company name",
            ],
        )

    logger.info(
        "comparables.api_complete",
        extra={"company": payload.company_name, "found": len(found.comparables)},
    )
    queries = lookup.bundle.total_queries + found.queries_issued
    return ComparablesResponse(
        reference_company=reference,
        comparables=found.comparables,
        total_found=len(found.comparables),
        breakdown=summarize_breakdown(reference, found.comparables),
        results_quality=results_quality(found.comparables, found.queries_issued),
        search_criteria={
            "sector": reference.sector,
            "country": reference.country,
            "size_category": reference.size_category,
            "min_similarity": payload.min_similarity,
            "max_results": payload.max_results,
            "prefer_same_country": payload.prefer_same_country,
            "candidates_evaluated": found.total_candidates,
            "failed_queries": found.failed_queries,
        },
        metadata=build_metadata(
            started, endpoint="find_comparables", queries=queries, bundle=lookup.bundle
        ),
    )
