"""Base platform interface for all supported platforms.

A platform knows which inbound URLs it accepts, which upstream endpoint
extracts them, how to unwrap the upstream envelope, and which
NormalizationProfile describes the response. ``download`` ties these
together for one request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional
from urllib.parse import urlparse

import structlog

from universal_downloader.core.exceptions import (
    InvalidURLError,
    NoDownloadableMediaError,
    UpstreamConnectionError,
    UpstreamInvalidResponseError,
    UpstreamRejectedError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from universal_downloader.monitoring.metrics import record_normalization
from universal_downloader.normalization.schema import (
    DEFAULT_PROFILE,
    NormalizationProfile,
    NormalizedResult,
)
from universal_downloader.platforms.registry import PlatformType, get_pipeline
from universal_downloader.upstream.client import UpstreamClient

logger = structlog.get_logger(__name__)

UNAVAILABLE_MESSAGE = "The download service is currently unavailable. Please try again later."
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."


def host_of(url: str) -> str:
    """Return the lower-cased host of a URL, tolerating a missing scheme."""
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    try:
        host = urlparse(candidate).hostname or ""
    except ValueError:
        return ""
    return host.lower()


def host_matches(url: str, domains: tuple[str, ...]) -> bool:
    """Check whether a URL's host is one of ``domains`` or a subdomain of one."""
    host = host_of(url)
    return any(host == d or host.endswith(f".{d}") for d in domains)


@dataclass
class DownloadResult:
    """A normalized result plus request metadata for the response envelope."""

    data: NormalizedResult
    meta: dict[str, Any] = field(default_factory=dict)


class BasePlatform(ABC):
    """Abstract base class for all platforms.

    Concrete platforms declare their upstream endpoint, cache lifetime and
    normalization profile as class attributes and implement URL validation.
    """

    platform_type: ClassVar[PlatformType]
    display_name: ClassVar[str]
    upstream_path: ClassVar[str]
    media_noun: ClassVar[str] = "media"
    cache_max_age: ClassVar[int] = 600
    profile: ClassVar[NormalizationProfile] = DEFAULT_PROFILE

    @property
    def name(self) -> str:
        return self.platform_type.value

    @abstractmethod
    def validate_url(self, url: str) -> bool:
        """Return True if the URL belongs to this platform."""
        ...

    @property
    def invalid_url_message(self) -> str:
        return f"Please provide a valid {self.display_name} URL"

    def ensure_valid_url(self, url: Optional[str]) -> str:
        """Return the stripped URL or raise InvalidURLError.

        Raises:
            InvalidURLError: If the URL is missing or not for this platform.
        """
        if url is None or not url.strip():
            raise InvalidURLError("URL parameter is required")
        url = url.strip()
        if not self.validate_url(url):
            raise InvalidURLError(self.invalid_url_message, {"url": url})
        return url

    def cache_control(self) -> str:
        """Cache-Control header for successful responses."""
        return (
            f"public, s-maxage={self.cache_max_age}, "
            f"stale-while-revalidate={self.cache_max_age * 2}"
        )

    def request_headers(self) -> Optional[dict[str, str]]:
        """Extra headers for the upstream request."""
        return None

    async def prepare_url(self, url: str, client: UpstreamClient) -> str:
        """Turn the inbound URL into the one sent upstream."""
        return url

    def unwrap(self, payload: dict[str, Any]) -> Any:
        """Extract the raw media object from the upstream envelope.

        A bare list of media entries is wrapped as ``{"medias": [...]}``.
        """
        data = payload.get("data")
        if isinstance(data, list):
            return {"medias": data}
        return data

    def describe(self, url: str, resolved_url: str) -> dict[str, Any]:
        """Metadata reported next to the normalized result."""
        meta: dict[str, Any] = {"platform": self.name, "source_url": url}
        if resolved_url != url:
            meta["resolved_url"] = resolved_url
        return meta

    async def download(self, url: str, client: UpstreamClient) -> DownloadResult:
        """Fetch and normalize the media behind a post URL.

        Args:
            url: Validated inbound URL.
            client: Upstream API client.

        Returns:
            DownloadResult with at least one download.

        Raises:
            UpstreamError: For transport and upstream failures.
            NoDownloadableMediaError: If the response held nothing downloadable.
        """
        resolved_url = await self.prepare_url(url, client)
        payload = await client.fetch_media(
            self.name,
            self.upstream_path,
            resolved_url,
            headers=self.request_headers(),
        )

        result = get_pipeline().normalize(self.name, self.unwrap(payload))
        record_normalization(self.name, len(result.downloads) if result else 0)

        if result is None:
            logger.warning("no_downloadable_media", platform=self.name, url=url)
            raise NoDownloadableMediaError(self.name)

        logger.info(
            "media_normalized",
            platform=self.name,
            downloads=len(result.downloads),
        )
        return DownloadResult(data=result, meta=self.describe(url, resolved_url))

    # -------------------------------------------------------------------------
    # User-facing error messages
    # -------------------------------------------------------------------------

    def not_found_message(self) -> str:
        return f"The {self.media_noun} could not be found. It might be private or deleted."

    def error_message(self, exc: Exception) -> str:
        """Map a failure to the message shown to API clients."""
        noun = self.media_noun
        if isinstance(exc, UpstreamTimeoutError):
            return "Request timeout. Please try again."
        if isinstance(exc, UpstreamConnectionError):
            if exc.dns_failure:
                return "Cannot resolve the media service hostname. Please try again later."
            return "Cannot connect to the media service."
        if isinstance(exc, UpstreamUnavailableError):
            return UNAVAILABLE_MESSAGE
        if isinstance(exc, UpstreamStatusError):
            if exc.status_code == 404:
                return self.not_found_message()
            if exc.status_code == 500:
                return "The download service encountered an error. Please try again."
            if exc.status_code == 503:
                return UNAVAILABLE_MESSAGE
            return f"Failed to fetch {noun} (Status: {exc.status_code})"
        if isinstance(exc, UpstreamRejectedError):
            return exc.reason or f"Failed to fetch {noun} data"
        if isinstance(exc, UpstreamInvalidResponseError):
            return "The download service returned an invalid response."
        if isinstance(exc, NoDownloadableMediaError):
            return (
                f"{noun.capitalize()} found but no download URLs available. "
                f"The {noun} might be restricted."
            )
        if isinstance(exc, InvalidURLError):
            return exc.message
        return UNEXPECTED_MESSAGE
