"""Client for a SearXNG instance protected by an OAuth2 bearer token."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import deque
from datetime import datetime, timezone
from threading import Lock
from typing import Any

import httpx

from company_intel.clients.auth import TokenProvider
from company_intel.clients.errors import (
    BackendError,
    ConfigurationError,
    SearchServiceError,
    SearchTimeoutError,
)
from company_intel.config import Settings, settings
from company_intel.models.search import (
    UNTITLED_PLACEHOLDER,
    CompanySearchBundle,
    QueryOutcome,
    SearchInfo,
    SearchOptions,
    SearchResponse,
    SearchResultItem,
)
from company_intel.observability.metrics import metrics
from company_intel.services.cache import TTLCache
from company_intel.services.focus_modes import (
    apply_search_focus,
    build_search_params,
    detect_optimal_focus,
    get_focus_mode,
)
from company_intel.services.geography import detect_company_geography

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}


def repair_truncated_json(text: str) -> dict[str, Any] | None:
    """Close the brackets left open by a truncated payload and re-parse it.

    Only bodies that look like a cut-off results object are attempted.
    """
    stripped = text.rstrip()
    if '"results":' not in stripped or stripped.endswith("}"):
        return None
    stack: list[str] = []
    in_string = False
    escaped = False
    for char in stripped:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]") and stack and stack[-1] == char:
            stack.pop()
    if in_string or not stack:
        return None
    candidate = stripped.rstrip(",") + "".join(reversed(stack))
    try:
        repaired = json.loads(candidate)
    except ValueError:
        return None
    return repaired if isinstance(repaired, dict) else None


def format_search_results(data: dict[str, Any], query: str) -> SearchResponse:
    """Normalize a raw backend payload into a SearchResponse."""
    raw_results = data.get("results") or []
    if not isinstance(raw_results, list):
        raise BackendError("`results` missing from search response")
    items = [_format_item(entry) for entry in raw_results if isinstance(entry, dict)]
    search_time = data.get("search_time")
    return SearchResponse(
        query=query,
        total_results=len(items),
        success=True,
        results=items,
        search_info=SearchInfo(
            engines=[str(engine) for engine in data.get("engines") or []],
            search_time=float(search_time) if isinstance(search_time, (int, float)) else None,
            suggestions=[str(s) for s in data.get("suggestions") or []],
        ),
    )


def _format_item(entry: dict[str, Any]) -> SearchResultItem:
    score = entry.get("score")
    return SearchResultItem(
        title=entry.get("title") or UNTITLED_PLACEHOLDER,
        url=entry.get("url") or "",
        content=entry.get("content") or entry.get("snippet") or "",
        engine=entry.get("engine") or "unknown",
        score=float(score) if isinstance(score, (int, float)) else 0.0,
        published_date=entry.get("publishedDate"),
        category=entry.get("category") or "general",
    )


class SearchStats:
    """Process-wide counters and a bounded, append-only error log."""

    def __init__(self, error_log_size: int = 100) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.cached_requests = 0
        self._errors: deque[dict[str, Any]] = deque(maxlen=error_log_size)
        self._lock = Lock()

    def record_request(self) -> None:
        with self._lock:
            self.total_requests += 1

    def record_success(self) -> None:
        with self._lock:
            self.successful_requests += 1

    def record_cache_hit(self) -> None:
        with self._lock:
            self.cached_requests += 1

    def record_error(self, error: str, *, query: str, focus_mode: str | None) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": error,
            "query": query,
            "focus_mode": focus_mode,
        }
        with self._lock:
            self._errors.append(entry)

    @property
    def errors(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._errors)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "total_requests": self.total_requests,
                "successful_requests": self.successful_requests,
                "cached_requests": self.cached_requests,
                "error_count": len(self._errors),
                "last_errors": list(self._errors)[-5:],
            }


class SearxngClient:
    """Focus-aware, caching search gateway in front of SearXNG."""

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        *,
        missing_settings: list[str] | None = None,
        timeout: float = 30.0,
        cache_ttl_seconds: float = 300.0,
        error_log_size: int = 100,
        user_agent: str = "Mozilla/5.0",
        default_language: str = "fr",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._tokens = token_provider
        self._configuration_error = ConfigurationError(missing_settings) if missing_settings else None
        self._user_agent = user_agent
        self._default_language = default_language
        self._cache: TTLCache[SearchResponse] = TTLCache(cache_ttl_seconds)
        self.stats = SearchStats(error_log_size)
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        if self._configuration_error is not None:
            logger.error("search.not_configured", extra={"missing": missing_settings})

    @classmethod
    def from_settings(
        cls, config: Settings = settings, *, http_client: httpx.AsyncClient | None = None
    ) -> "SearxngClient":
        return cls(
            config.searxng_url or "",
            TokenProvider.from_settings(config, http_client=http_client),
            missing_settings=config.missing_search_settings(),
            timeout=config.search_timeout_seconds,
            cache_ttl_seconds=config.search_cache_ttl_seconds,
            error_log_size=config.search_error_log_size,
            user_agent=config.search_user_agent,
            default_language=config.default_search_language,
            http_client=http_client,
        )

    @property
    def configured(self) -> bool:
        return self._configuration_error is None

    @property
    def configuration_error(self) -> ConfigurationError | None:
        return self._configuration_error

    @property
    def token_provider(self) -> TokenProvider:
        return self._tokens

    async def search(
        self,
        query: str,
        options: SearchOptions | None = None,
        focus_mode: str | None = None,
    ) -> SearchResponse:
        """Run a focus-rewritten search, serving fresh results from cache."""
        self.stats.record_request()
        metrics.increment("search.requests")
        if self._configuration_error is not None:
            message = str(self._configuration_error)
            self.stats.record_error(message, query=query, focus_mode=focus_mode)
            return SearchResponse.not_configured(query, message)

        mode_name = focus_mode or detect_optimal_focus(query)
        mode = get_focus_mode(mode_name)
        params = apply_search_focus(
            build_search_params(query, options, default_language=self._default_language),
            mode_name,
        )
        cache_key = f"web_{params.q}_{json.dumps(params.model_dump(), sort_keys=True)}_{mode_name}"

        cached = self._cache.get(cache_key)
        if cached is not None:
            self.stats.record_cache_hit()
            metrics.increment("search.cache_hit", tags={"focus_mode": mode_name})
            return cached

        start = time.perf_counter()
        try:
            token = await self._tokens.get_access_token()
            data = await self._fetch(params.as_query_params(), token)
            formatted = format_search_results(data, query)
        except SearchServiceError as exc:
            self.stats.record_error(str(exc), query=query, focus_mode=mode_name)
            metrics.increment("search.errors", tags={"code": exc.code})
            logger.error(
                "search.failed",
                extra={"query": query, "focus_mode": mode_name, "code": exc.code},
            )
            raise
        finally:
            metrics.timing("search.latency_ms", (time.perf_counter() - start) * 1000)

        response = formatted.model_copy(
            update={
                "focus_mode": mode_name,
                "focus_description": mode.description,
                "optimized_query": params.q,
                "original_query": query,
            }
        )
        self._cache.set(cache_key, response)
        self.stats.record_success()
        metrics.increment("search.success", tags={"focus_mode": mode_name})
        return response

    async def _fetch(self, params: dict[str, str | int], token: str) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }
        try:
            response = await self._http.get(f"{self._base_url}/search", params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise SearchTimeoutError() from exc
        except httpx.HTTPError as exc:
            raise BackendError(f"HTTP error calling search backend: {exc}") from exc

        if response.status_code in (408, 504):
            raise SearchTimeoutError(f"Search backend timed out: {response.status_code}")
        if response.status_code >= 400:
            raise BackendError(
                f"Search request failed: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        text = response.text
        if not text.strip():
            raise BackendError("Empty response from search backend", status_code=response.status_code)
        try:
            data = json.loads(text)
        except ValueError:
            data = repair_truncated_json(text)
            if data is None:
                raise BackendError(
                    "Unparseable search response", status_code=response.status_code, body=text
                ) from None
            logger.warning("search.json_repaired", extra={"length": len(text)})
        if not isinstance(data, dict):
            raise BackendError("Search response is not a JSON object", body=text)
        return data

    async def search_company_info(
        self, company_name: str, options: SearchOptions | None = None
    ) -> CompanySearchBundle:
        """Issue the geography-localized lookups for one company concurrently.

        Individual failures are logged and skipped; when every query fails the
        first error propagates.
        """
        geo = detect_company_geography(company_name)
        if self._configuration_error is not None:
            return CompanySearchBundle(
                company_name=company_name,
                success=False,
                configured=False,
                error=str(self._configuration_error),
                detected_geography=geo,
            )

        language = (options.language if options and options.language else None) or geo.default_language
        search_options = (options or SearchOptions()).model_copy(update={"language": language})
        queries = [
            (f'"{company_name}" {geo.company_term} {geo.region}', "companyResearch"),
            (f"{company_name} {geo.financial_term} information", "financialSearch"),
            (f"{company_name} company profile business {geo.language}", "companyResearch"),
        ]
        outcomes = await asyncio.gather(
            *(self.search(query, search_options, mode) for query, mode in queries),
            return_exceptions=True,
        )

        search_results: list[QueryOutcome] = []
        failures: list[BaseException] = []
        for (query, mode), outcome in zip(queries, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                failures.append(outcome)
                logger.warning(
                    "search.company_query_failed",
                    extra={"company": company_name, "query": query, "error": str(outcome)},
                )
                continue
            if outcome.success and outcome.results:
                search_results.append(
                    QueryOutcome(
                        query=query,
                        focus_mode=mode,
                        focus_description=outcome.focus_description,
                        results=outcome.results,
                        geo_context=geo,
                    )
                )
        if failures and len(failures) == len(queries):
            raise failures[0]

        return CompanySearchBundle(
            company_name=company_name,
            success=bool(search_results),
            search_results=search_results,
            total_queries=len(queries),
            successful_queries=len(search_results),
            detected_geography=geo,
        )

    async def test_connection(self) -> bool:
        """Return whether a minimal search round-trip succeeds."""
        if self._configuration_error is not None:
            return False
        try:
            response = await self.search("connectivity check", SearchOptions(page=1), "companyResearch")
        except SearchServiceError as exc:
            logger.warning("search.connection_failed", extra={"code": exc.code})
            return False
        return response.success

    def service_stats(self) -> dict[str, Any]:
        return {
            "configured": self.configured,
            "configuration_error": str(self._configuration_error) if self._configuration_error else None,
            "token_status": self._tokens.token_status,
            "cache": self._cache.stats,
            **self.stats.snapshot(),
        }

    async def aclose(self) -> None:
        """Close the underlying HTTP clients."""
        if self._owns_http_client:
            await self._http.aclose()
        await self._tokens.aclose()
