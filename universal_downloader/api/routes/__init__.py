"""API route modules."""

from universal_downloader.api.routes.downloads import router as downloads_router
from universal_downloader.api.routes.health import router as health_router

__all__ = ["downloads_router", "health_router"]
