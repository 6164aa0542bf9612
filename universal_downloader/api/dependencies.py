"""FastAPI dependency injection providers."""

from fastapi import Request

from universal_downloader.config.settings import Settings, get_settings
from universal_downloader.upstream.client import UpstreamClient


def get_upstream_client(request: Request) -> UpstreamClient:
    """
    Get the shared upstream client.

    The client is created by the application lifespan and reused across
    requests so they share one connection pool.

    Raises:
        RuntimeError: If the application lifespan has not run.
    """
    client = getattr(request.app.state, "upstream_client", None)
    if client is None:
        raise RuntimeError(
            "Upstream client not initialized. Ensure the application startup has run."
        )
    return client


def get_app_settings(request: Request) -> Settings:
    """
    Get the settings the application was created with.

    Falls back to the cached environment settings.
    """
    return getattr(request.app.state, "settings", None) or get_settings()
