"""Translate service outcomes into HTTP errors with a uniform envelope."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status

from company_intel.clients.errors import SearchServiceError
from company_intel.config import settings
from company_intel.utils.text import contains_suspicious_term

logger = logging.getLogger(__name__)

NOT_FOUND_SUGGESTIONS = [
    "Check the spelling of the company name",
    "Try the full legal name or the stock symbol",
    "Add the country or legal suffix (SA, Ltd, Inc)",
]


def error_detail(code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details,
        }
    }


def reject_suspicious(value: str) -> None:
    """Refuse placeholder or test-like names before any search is issued."""
    if contains_suspicious_term(value, settings.suspicious_terms):
        logger.info("api.suspicious_input_rejected", extra={"value": value})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("INVALID_INPUT", "Company name looks like placeholder or test data"),
        )


def search_http_error(exc: SearchServiceError, *, endpoint: str) -> HTTPException:
    logger.error("api.search_error", extra={"endpoint": endpoint, "code": exc.code})
    details = {"status_code": exc.status_code} if exc.status_code else None
    return HTTPException(
        status_code=_map_error_code(exc.code),
        detail=error_detail(exc.code, str(exc), details),
    )


def not_configured_error(message: str | None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=error_detail("SEARCH_NOT_CONFIGURED", message or "Search service is not configured"),
    )


def not_found_error(message: str, suggestions: list[str] | None = None) -> HTTPException:
    detail = error_detail("NOT_FOUND", message)
    detail["suggestions"] = suggestions or NOT_FOUND_SUGGESTIONS
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _map_error_code(code: str) -> int:
    if code == "SEARCH_NOT_CONFIGURED":
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if code == "SEARCH_TIMEOUT":
        return status.HTTP_504_GATEWAY_TIMEOUT
    if code in ("SEARCH_AUTH_FAILED", "SEARCH_BACKEND_ERROR"):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR
