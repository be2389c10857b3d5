"""Error family raised by the search backend clients."""

from __future__ import annotations


class SearchServiceError(RuntimeError):
    """Base error for search backend failures."""

    def __init__(
        self, message: str, code: str = "SEARCH_ERROR", *, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class ConfigurationError(SearchServiceError):
    """Raised when required backend settings are missing."""

    def __init__(self, missing: list[str] | None = None) -> None:
        self.missing = list(missing or [])
        message = "Search service is not configured"
        if self.missing:
            message = f"{message}: missing {', '.join(self.missing)}"
        super().__init__(message, code="SEARCH_NOT_CONFIGURED")


class AuthError(SearchServiceError):
    """Raised when the client-credentials token exchange fails."""

    def __init__(self, message: str = "Token exchange failed", *, status_code: int | None = None) -> None:
        super().__init__(message, code="SEARCH_AUTH_FAILED", status_code=status_code)


class SearchTimeoutError(SearchServiceError):
    """Raised when the search backend does not answer in time."""

    def __init__(self, message: str = "Search request timed out") -> None:
        super().__init__(message, code="SEARCH_TIMEOUT")


class BackendError(SearchServiceError):
    """Raised on non-2xx responses or unparseable payloads."""

    def __init__(
        self, message: str, *, status_code: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message, code="SEARCH_BACKEND_ERROR", status_code=status_code)
        self.body = (body or "")[:500]
