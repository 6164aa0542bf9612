"""Universal Downloader API - Main FastAPI Application.

This module provides the FastAPI application for the downloader service.
It includes:
- CORS middleware configuration
- Download endpoints per platform (/api/{platform})
- Health check endpoints
- Prometheus metrics at /metrics

Usage:
    # Run with uvicorn
    uvicorn universal_downloader.api.main:app --reload

    # Or run directly
    python -m universal_downloader.api.main
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from universal_downloader import __version__
from universal_downloader.api.dependencies import get_app_settings
from universal_downloader.api.models import ValidationErrorDetail
from universal_downloader.api.routes import downloads_router, health_router
from universal_downloader.api.routes.downloads import error_details, failure_response
from universal_downloader.api.routes.health import set_server_start_time
from universal_downloader.config.settings import Settings, get_settings
from universal_downloader.core.exceptions import InvalidURLError, UnknownPlatformError
from universal_downloader.core.logging import configure_logging
from universal_downloader.monitoring.metrics import get_metrics_app
from universal_downloader.platforms import list_platforms
from universal_downloader.upstream.client import UpstreamClient

logger = structlog.get_logger(__name__)

# API metadata for OpenAPI documentation
API_TITLE = "Universal Downloader API"
API_DESCRIPTION = """
## Media download links for social platforms

Paste a public post URL and get back direct download links in one shape,
whatever the platform.

### Supported platforms

Facebook, Instagram, TikTok, Twitter/X, Spotify and YouTube.

### Usage

- `GET /api/{platform}?url=<post url>`
- `POST /api/{platform}` with `{"url": "<post url>"}`

Responses are `{"success": true, "data": {...}}` or
`{"success": false, "error": "..."}`.
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Configure logging, open the upstream client
    - Shutdown: Close the upstream client
    """
    settings: Settings = app.state.settings
    configure_logging(settings)

    logger.info("application_starting", app_env=settings.app_env)
    set_server_start_time()

    if app.state.upstream_client is None:
        app.state.upstream_client = UpstreamClient(settings)

    logger.info(
        "application_started",
        upstream=app.state.upstream_client.base_url,
        platforms=[p.value for p in list_platforms()],
    )

    yield

    logger.info("application_stopping")
    await app.state.upstream_client.aclose()
    app.state.upstream_client = None
    logger.info("application_stopped")


# =============================================================================
# Exception Handlers
# =============================================================================


async def invalid_url_handler(request: Request, exc: InvalidURLError) -> JSONResponse:
    """Missing or malformed ``url`` parameter."""
    logger.info("invalid_url", path=request.url.path, error=exc.message)
    return failure_response(
        exc.message,
        get_app_settings(request),
        status_code=status.HTTP_400_BAD_REQUEST,
        details=error_details(exc),
    )


async def unknown_platform_handler(
    request: Request, exc: UnknownPlatformError
) -> JSONResponse:
    """Route segment names no registered platform."""
    return failure_response(
        exc.message,
        get_app_settings(request),
        status_code=status.HTTP_404_NOT_FOUND,
        details={"supported": [p.value for p in list_platforms()]},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request bodies with the download envelope."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(ValidationErrorDetail(
            field=field,
            message=error["msg"],
            value=error.get("input"),
        ).model_dump(mode="json"))

    return failure_response(
        "Invalid request",
        get_app_settings(request),
        status_code=status.HTTP_400_BAD_REQUEST,
        details={"errors": errors},
    )


async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return failure_response(
        "An unexpected error occurred. Please try again.",
        get_app_settings(request),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details=error_details(exc),
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    settings: Optional[Settings] = None,
    upstream_client: Optional[UpstreamClient] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Application settings; defaults to the environment.
        upstream_client: Client to use instead of one built from settings.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {
                "name": "Health",
                "description": "System health and status endpoints",
            },
            {
                "name": "Downloads",
                "description": "Normalized download links per platform",
            },
        ],
    )
    app.state.settings = settings
    app.state.upstream_client = upstream_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.add_exception_handler(InvalidURLError, invalid_url_handler)
    app.add_exception_handler(UnknownPlatformError, unknown_platform_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint - lists the service entry points."""
        return {
            "name": API_TITLE,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics",
            "platforms": {
                p.value: f"/api/{p.value}" for p in list_platforms()
            },
        }

    # Health endpoints at root level
    app.include_router(health_router)
    app.include_router(downloads_router)
    app.mount("/metrics", get_metrics_app())

    return app


app = create_app()


# =============================================================================
# Development Server
# =============================================================================


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "server_starting",
        host=settings.api_host,
        port=settings.api_port,
        app_env=settings.app_env,
    )

    uvicorn.run(
        "universal_downloader.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
