import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from company_intel.api.dependencies import close_search_client
from company_intel.api.errors import error_detail
from company_intel.api.routes import comparables, companies, health
from company_intel.api.routes import metrics as metrics_routes
from company_intel.clients.errors import ConfigurationError
from company_intel.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            integrations=[
                FastApiIntegration(auto_enabling_instrumentations=False),
                LoggingIntegration(level=logging.INFO),
            ],
            traces_sample_rate=0.1,
            environment=settings.environment,
        )
        logger.info("Sentry initialized")

    missing = settings.missing_search_settings()
    if missing:
        logger.error("startup.search_not_configured", extra={"missing": missing})
        if settings.enforce_search_config:
            raise ConfigurationError(missing)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    await close_search_client()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Company profiling, comparables and financial benchmarking over SearXNG web search",
    lifespan=lifespan,
    debug=settings.debug,
)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(
    TrustedHostMiddleware, allowed_hosts=["*"] if settings.debug else ["localhost", "127.0.0.1"]
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.info(f"{request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Response status: {response.status_code}")
    return response


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.exception("api.unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content=error_detail("INTERNAL_ERROR", "Internal server error"),
    )


app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(companies.router, prefix="/api", tags=["companies"])
app.include_router(comparables.router, prefix="/api", tags=["comparables"])
app.include_router(metrics_routes.router, prefix="/api", tags=["metrics"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "endpoints": {
            "health": "/health",
            "connection": "/health/connection",
            "search": "/api/companies/search",
            "details": "/api/companies/details",
            "analyze": "/api/companies/analyze",
            "comparables": "/api/comparables",
            "metrics": "/api/metrics/analyze",
        },
    }
