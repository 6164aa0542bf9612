"""Download endpoints.

One GET and one POST endpoint per platform, both answering with the
``{success, data | error}`` envelope. Upstream failures are reported with
HTTP 200 and ``success: false``; only a missing or invalid URL (400) and
an unknown platform (404) change the status code.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from universal_downloader.api.dependencies import get_app_settings, get_upstream_client
from universal_downloader.api.models import (
    DownloadErrorResponse,
    DownloadRequest,
    DownloadSuccessResponse,
)
from universal_downloader.config.settings import Settings
from universal_downloader.core.exceptions import DownloaderError
from universal_downloader.platforms import PlatformType, get_platform
from universal_downloader.upstream.client import UpstreamClient

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Downloads"])


def error_details(exc: Exception) -> dict[str, Any]:
    """Diagnostic payload for an exception, shown only in debug mode."""
    details: dict[str, Any] = {"type": type(exc).__name__}
    if isinstance(exc, DownloaderError):
        details["message"] = exc.message
        details.update(exc.details)
    else:
        details["message"] = str(exc)
    return details


def failure_response(
    message: str,
    settings: Settings,
    status_code: int = status.HTTP_200_OK,
    details: Optional[Any] = None,
) -> JSONResponse:
    """Build the ``success: false`` envelope."""
    body = DownloadErrorResponse(
        error=message,
        details=details if settings.debug else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


async def run_download(
    platform_name: str,
    url: Optional[str],
    client: UpstreamClient,
    settings: Settings,
) -> JSONResponse:
    """Validate, fetch and normalize one download request.

    Args:
        platform_name: Route segment naming the platform.
        url: The ``url`` parameter as received.
        client: Shared upstream client.
        settings: Application settings.

    Returns:
        The success envelope with the platform's Cache-Control header, or
        the failure envelope.

    Raises:
        UnknownPlatformError: Handled by the app as a 404 envelope.
        InvalidURLError: Handled by the app as a 400 envelope.
    """
    platform = get_platform(platform_name)
    url = platform.ensure_valid_url(url)

    try:
        result = await platform.download(url, client)
    except DownloaderError as e:
        logger.warning(
            "download_failed",
            platform=platform.name,
            url=url,
            error=str(e),
            error_type=type(e).__name__,
        )
        return failure_response(platform.error_message(e), settings, details=error_details(e))
    except Exception as e:
        logger.error(
            "download_unexpected_error",
            platform=platform.name,
            url=url,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return failure_response(platform.error_message(e), settings, details=error_details(e))

    body = DownloadSuccessResponse(data=result.data, meta=result.meta)
    return JSONResponse(
        content=body.model_dump(mode="json"),
        headers={"Cache-Control": platform.cache_control()},
    )


@router.get(
    "/twitter/download",
    summary="Download Twitter/X Media (legacy path)",
    description="Alias of GET /api/twitter kept for existing clients.",
)
async def download_twitter_legacy(
    url: Optional[str] = Query(None, description="Tweet URL"),
    client: UpstreamClient = Depends(get_upstream_client),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    return await run_download(PlatformType.TWITTER.value, url, client, settings)


@router.get(
    "/{platform}",
    summary="Download Media",
    description="Extract downloadable media for a post URL given as a query parameter.",
    responses={
        200: {"model": DownloadSuccessResponse},
        400: {"model": DownloadErrorResponse},
        404: {"model": DownloadErrorResponse},
    },
)
async def download_get(
    platform: str,
    url: Optional[str] = Query(None, description="Public post URL"),
    client: UpstreamClient = Depends(get_upstream_client),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """
    Extract downloadable media for a post.

    Supported platforms: facebook, instagram, tiktok, twitter (or x),
    spotify, youtube.
    """
    return await run_download(platform, url, client, settings)


@router.post(
    "/{platform}",
    summary="Download Media (JSON body)",
    description="Same as the GET endpoint with the URL in a JSON body.",
    responses={
        200: {"model": DownloadSuccessResponse},
        400: {"model": DownloadErrorResponse},
        404: {"model": DownloadErrorResponse},
    },
)
async def download_post(
    platform: str,
    body: DownloadRequest,
    client: UpstreamClient = Depends(get_upstream_client),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    return await run_download(platform, body.url, client, settings)
