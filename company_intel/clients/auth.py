"""OAuth2 client-credentials token provider for the search backend."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

import httpx

from company_intel.clients.errors import AuthError
from company_intel.config import Settings, settings
from company_intel.observability.metrics import metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


def build_scope(resource_url: str) -> str:
    """Append `/.default` to the resource URL unless it is already suffixed."""
    trimmed = resource_url.strip()
    if trimmed.endswith("/.default"):
        return trimmed
    return f"{trimmed.rstrip('/')}/.default"


class TokenProvider:
    """Fetches and caches a bearer token until shortly before it expires.

    Concurrent callers that both find the cache empty may both refresh; the
    last stored token wins.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        tenant_id: str,
        resource_url: str,
        endpoint_template: str = settings.token_endpoint_template,
        expiry_margin_seconds: float = 60.0,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._scope = build_scope(resource_url)
        self._endpoint = endpoint_template.format(tenant_id=tenant_id)
        self._margin = expiry_margin_seconds
        self._clock = clock
        self._token: AccessToken | None = None
        self._lock = Lock()
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, config: Settings = settings, *, http_client: httpx.AsyncClient | None = None
    ) -> "TokenProvider":
        return cls(
            client_id=config.client_id or "",
            client_secret=config.client_secret or "",
            tenant_id=config.tenant_id or "",
            resource_url=config.token_url or "",
            endpoint_template=config.token_endpoint_template,
            expiry_margin_seconds=config.token_expiry_margin_seconds,
            timeout=config.search_timeout_seconds,
            http_client=http_client,
        )

    @property
    def token_status(self) -> str:
        with self._lock:
            token = self._token
        if token is None:
            return "none"
        return "valid" if token.is_valid(self._clock()) else "expired"

    async def get_access_token(self) -> str:
        """Return a cached bearer token, refreshing it when absent or expired."""
        with self._lock:
            cached = self._token
        if cached is not None and cached.is_valid(self._clock()):
            metrics.increment("auth.token_cache_hit")
            return cached.value

        token = await self._request_token()
        with self._lock:
            self._token = token
        metrics.increment("auth.token_refresh")
        logger.info("auth.token_refreshed", extra={"expires_at": token.expires_at})
        return token.value

    async def _request_token(self) -> AccessToken:
        form = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "client_credentials",
            "scope": self._scope,
        }
        try:
            response = await self._http.post(
                self._endpoint,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            logger.error("auth.token_transport_error", extra={"error": type(exc).__name__})
            raise AuthError(f"Token request failed: {exc}") from exc

        if response.status_code >= 400:
            raise AuthError(
                f"Token request failed: {response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            value = payload["access_token"]
            expires_in = float(payload.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthError("Token response missing access_token", status_code=response.status_code) from exc

        return AccessToken(value=value, expires_at=self._clock() + expires_in - self._margin)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._owns_http_client:
            await self._http.aclose()
