from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from company_intel.api.dependencies import get_search_client
from company_intel.clients.errors import AuthError
from company_intel.clients.searxng import SearxngClient
from company_intel.config import settings
from company_intel.models.api import ConnectionRecommendation, ConnectionReport
from company_intel.utils.backoff import retry_async

logger = logging.getLogger(__name__)
router = APIRouter()

_CONFIG_FLAGS = {
    "searxng_url": "SEARXNG_URL",
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",
    "tenant_id": "TENANT_ID",
    "token_url": "TOKEN_URL",
}


@router.get("")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "search_configured": settings.search_configured,
    }


async def _probe_connectivity(client: SearxngClient) -> bool:
    async def probe() -> bool:
        if not await client.test_connection():
            raise ConnectionError("search backend unreachable")
        return True

    try:
        return await retry_async(
            probe,
            attempts=max(settings.connection_check_attempts, 1),
            retry_on=(ConnectionError,),
            base_delay=0.5,
            max_delay=5.0,
        )
    except ConnectionError:
        return False


async def _probe_authentication(client: SearxngClient) -> dict[str, object]:
    if not client.configured:
        return {"status": "skipped", "token_status": client.token_provider.token_status}
    try:
        await client.token_provider.get_access_token()
    except AuthError as exc:
        logger.warning("health.auth_failed", extra={"error": str(exc)})
        return {"status": "failed", "error": str(exc), "token_status": client.token_provider.token_status}
    return {"status": "ok", "token_status": client.token_provider.token_status}


def _recommendations(
    configured: bool, connected: bool, auth: dict[str, object], stats: dict[str, object]
) -> list[ConnectionRecommendation]:
    items: list[ConnectionRecommendation] = []
    if not configured:
        items.append(
            ConnectionRecommendation(
                type="configuration",
                message="Search backend settings are incomplete",
                action=f"Set {', '.join(settings.missing_search_settings())} in the environment",
            )
        )
    if auth.get("status") == "failed":
        items.append(
            ConnectionRecommendation(
                type="auth_error",
                message="Token exchange with the identity provider failed",
                action="Verify CLIENT_ID, CLIENT_SECRET, TENANT_ID and TOKEN_URL",
            )
        )
    if configured and not connected:
        items.append(
            ConnectionRecommendation(
                type="error",
                message="Search backend did not answer the connectivity check",
                action="Check SEARXNG_URL reachability and backend logs",
            )
        )
    error_count = stats.get("error_count") or 0
    if error_count:
        items.append(
            ConnectionRecommendation(
                type="errors",
                message=f"{error_count} search errors recorded",
                action="Inspect service_stats.last_errors for details",
            )
        )
    if connected and not items:
        items.append(
            ConnectionRecommendation(
                type="success",
                message="Search backend is reachable and authenticated",
                action="No action required",
            )
        )
    return items


@router.get("/connection")
async def connection_check(client: SearxngClient = Depends(get_search_client)):
    """Probe configuration, authentication and connectivity of the search backend."""
    configured = client.configured
    connected = await _probe_connectivity(client) if configured else False
    auth = await _probe_authentication(client)
    stats = client.service_stats()

    report = ConnectionReport(
        success=connected,
        message="Search backend connected" if connected else "Search backend unavailable",
        connectivity={"connected": connected, "searxng_url": settings.searxng_url},
        authentication=auth,
        service_configuration={
            label: "configured" if getattr(settings, field) else "missing"
            for field, label in _CONFIG_FLAGS.items()
        },
        service_stats=stats,
        recommendations=_recommendations(configured, connected, auth, stats),
    )
    logger.info("health.connection_check", extra={"connected": connected, "configured": configured})
    return JSONResponse(
        status_code=status.HTTP_200_OK if connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=report.model_dump(mode="json"),
    )
