"""Company profile endpoints."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status

from company_intel.api.dependencies import (
    get_company_analyzer,
    get_profile_extractor,
    get_search_client,
)
from company_intel.api.errors import error_detail, not_configured_error, reject_suspicious
from company_intel.api.lookup import build_metadata, lookup_profile
from company_intel.clients.searxng import SearxngClient
from company_intel.models.api import (
    CompanyAnalysisResponse,
    CompanyAnalyzeRequest,
    CompanyDetailsRequest,
    CompanyProfileResponse,
    CompanySearchRequest,
)
from company_intel.models.search import SearchOptions
from company_intel.services.analysis import CompanyAnalyzer, company_relevance_score
from company_intel.services.extraction.profile import ExtractionVariant, ProfileExtractor
from company_intel.services.quality import build_data_quality

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/companies/search", response_model=CompanyProfileResponse)
async def search_company(
    payload: CompanySearchRequest,
    client: SearxngClient = Depends(get_search_client),
    extractor: ProfileExtractor = Depends(get_profile_extractor),
) -> CompanyProfileResponse:
    """Build a basic company profile from web search results."""
    started = time.perf_counter()
    reject_suspicious(payload.query)
    lookup = await lookup_profile(
        client, extractor, payload.query, ExtractionVariant.BASIC, endpoint="search_company"
    )
    logger.info(
        "companies.search_complete",
        extra={"company": payload.query, "confidence": lookup.profile.confidence},
    )
    return CompanyProfileResponse(
        data=lookup.profile,
        search_query=payload.query,
        data_quality=build_data_quality(
            lookup.profile,
            search_results_count=len(lookup.bundle.all_results),
            search_queries=lookup.bundle.total_queries,
        ),
        metadata=build_metadata(
            started,
            endpoint="search_company",
            queries=lookup.bundle.total_queries,
            bundle=lookup.bundle,
        ),
    )


@router.post("/companies/details", response_model=CompanyProfileResponse)
async def get_company_details(
    payload: CompanyDetailsRequest,
    client: SearxngClient = Depends(get_search_client),
    extractor: ProfileExtractor = Depends(get_profile_extractor),
) -> CompanyProfileResponse:
    """Detailed profile by stock symbol or company name."""
    started = time.perf_counter()
    if not payload.identifier:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("MISSING_IDENTIFIER", "Either symbol or name is required"),
        )
    reject_suspicious(payload.identifier)
    options = SearchOptions(language="en" if payload.symbol else "fr")
    lookup = await lookup_profile(
        client,
        extractor,
        payload.identifier,
        ExtractionVariant.DETAILED,
        endpoint="get_company_details",
        options=options,
        symbol=payload.symbol,
    )
    return CompanyProfileResponse(
        data=lookup.profile,
        search_query=payload.identifier,
        data_quality=build_data_quality(
            lookup.profile,
            search_results_count=len(lookup.bundle.all_results),
            search_queries=lookup.bundle.total_queries,
            detailed=True,
        ),
        metadata=build_metadata(
            started,
            endpoint="get_company_details",
            queries=lookup.bundle.total_queries,
            bundle=lookup.bundle,
        ),
    )


@router.post("/companies/analyze", response_model=CompanyAnalysisResponse)
async def analyze_company(
    payload: CompanyAnalyzeRequest,
    client: SearxngClient = Depends(get_search_client),
    analyzer: CompanyAnalyzer = Depends(get_company_analyzer),
) -> CompanyAnalysisResponse:
    """Deep multi-query research; falls back to a low-confidence profile."""
    started = time.perf_counter()
    reject_suspicious(payload.company_name)
    if not client.configured:
        raise not_configured_error(str(client.configuration_error))
    analysis = await analyzer.analyze(payload.company_name)
    return CompanyAnalysisResponse(
        data=analysis.profile,
        search_query=payload.company_name,
        relevance_score=company_relevance_score(analysis.profile),
        data_quality=build_data_quality(
            analysis.profile,
            search_results_count=analysis.relevant_results,
            search_queries=analysis.queries,
            detailed=True,
        ),
        metadata=build_metadata(started, endpoint="analyze_company", queries=analysis.queries),
    )
