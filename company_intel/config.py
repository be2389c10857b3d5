from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

_REQUIRED_SEARCH_SETTINGS = ("searxng_url", "client_id", "client_secret", "tenant_id", "token_url")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Company Intel"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    enforce_search_config: bool = True

    # Search backend (SearXNG behind an Azure AD app registration)
    searxng_url: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    tenant_id: str | None = None
    token_url: str | None = None
    token_endpoint_template: str = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"
    token_expiry_margin_seconds: int = 60
    search_timeout_seconds: float = 30.0
    search_cache_ttl_seconds: int = 300
    search_error_log_size: int = 100
    search_user_agent: str = "Mozilla/5.0 (compatible; CompanyIntel/1.0)"
    default_search_language: str = "fr"

    # Extraction fallbacks
    default_sector: str = "Technology"
    default_region: str = "Global"
    home_country: str = "France"

    # Analysis
    profile_cache_ttl_seconds: int = 1800
    min_profile_confidence: float = 0.1
    max_comparables_cap: int = 50
    max_recommendations: int = 8
    suspicious_terms: list[str] = [
        "test",
        "exemple",
        "sample",
        "demo",
        "fake",
        "null",
        "undefined",
        "xxx",
    ]
    connection_check_attempts: int = 1

    # Security
    cors_origins: list[str] = []  # Empty by default for security

    # Sentry
    sentry_dsn: str | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Metrics
    metrics_backend: str = "stdout"
    metrics_namespace: str = "company_intel"
    metrics_disable: bool = False
    metrics_sample_rate: float = 1.0
    metrics_statsd_host: str = "127.0.0.1"
    metrics_statsd_port: int = 8125

    def missing_search_settings(self) -> list[str]:
        """Return the names of required search settings that are unset."""
        return [name.upper() for name in _REQUIRED_SEARCH_SETTINGS if not getattr(self, name)]

    @property
    def search_configured(self) -> bool:
        return not self.missing_search_settings()

    model_config = ConfigDict(env_file=".env", case_sensitive=False)


settings = Settings()
