from __future__ import annotations

import time
from dataclasses import dataclass

from company_intel.api.errors import not_configured_error, not_found_error, search_http_error
from company_intel.clients.errors import SearchServiceError
from company_intel.clients.searxng import SearxngClient
from company_intel.config import settings
from company_intel.models.company import CompanyProfile
from company_intel.models.search import CompanySearchBundle, SearchOptions
from company_intel.services.extraction.profile import ExtractionVariant, ProfileExtractor
from company_intel.services.quality import ResponseMetadata


@dataclass(frozen=True)
class ProfileLookup:
    profile: CompanyProfile
    bundle: CompanySearchBundle


async def lookup_profile(
    client: SearxngClient,
    extractor: ProfileExtractor,
    identifier: str,
    variant: ExtractionVariant,
    *,
    endpoint: str,
    options: SearchOptions | None = None,
    symbol: str | None = None,
) -> ProfileLookup:
    """Search for a company and extract its profile, or raise the matching HTTP error."""
    try:
        bundle = await client.search_company_info(identifier, options)
    except SearchServiceError as exc:
        raise search_http_error(exc, endpoint=endpoint) from exc
    if not bundle.configured:
        raise not_configured_error(bundle.error)

    results = bundle.all_results
    if not results:
        raise not_found_error(f"No information found for {identifier}")
    profile = extractor.extract(identifier, results, variant, symbol=symbol)
    if profile.confidence < settings.min_profile_confidence:
        raise not_found_error(f"Not enough reliable information for {identifier}")
    return ProfileLookup(profile=profile, bundle=bundle)


def build_metadata(
    started: float, *, endpoint: str, queries: int, bundle: CompanySearchBundle | None = None
) -> ResponseMetadata:
    return ResponseMetadata(
        search_duration_ms=round((time.perf_counter() - started) * 1000),
        endpoint=endpoint,
        total_web_queries=queries,
        geography_detected=bundle.detected_geography if bundle else None,
    )
