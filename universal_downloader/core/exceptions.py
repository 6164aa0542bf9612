"""
Core exception hierarchy for the downloader service.

Provides standardized exception types with categorization for retry logic.
The normalization engine never raises; these types belong to the upstream
transport and the HTTP layer.
"""

from typing import Any, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class DownloaderError(Exception):
    """Base exception for all downloader errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RetryableError(DownloaderError):
    """
    Transient errors that may succeed on a later attempt.

    Examples: Timeouts, refused connections, open circuit breakers.
    """

    pass


class PermanentError(DownloaderError):
    """
    Errors that won't be fixed by retrying.

    Examples: Invalid input URLs, missing resources, rejected requests.
    """

    pass


# =============================================================================
# Request Errors
# =============================================================================


class InvalidURLError(PermanentError):
    """Raised when the inbound URL parameter is missing or malformed."""

    pass


class UnknownPlatformError(PermanentError):
    """Raised when a request names a platform that is not registered."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Unsupported platform: {platform}", {"platform": platform})


# =============================================================================
# Upstream Errors
# =============================================================================


class UpstreamError(DownloaderError):
    """Base exception for third-party media API errors."""

    def __init__(
        self,
        platform: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.platform = platform
        super().__init__(f"[{platform}] {message}", details)


class UpstreamTimeoutError(UpstreamError, RetryableError):
    """Raised when the upstream call exceeds its timeout."""

    pass


class UpstreamConnectionError(UpstreamError, RetryableError):
    """Raised when the upstream host cannot be reached."""

    def __init__(
        self,
        platform: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
        dns_failure: bool = False,
    ):
        self.dns_failure = dns_failure
        super().__init__(platform, message, details)


class UpstreamUnavailableError(UpstreamError, RetryableError):
    """Raised when the circuit breaker for an upstream is open."""

    pass


class UpstreamStatusError(UpstreamError, PermanentError):
    """Raised when the upstream answers with a non-2xx status."""

    def __init__(
        self,
        platform: str,
        status_code: int,
        body: str = "",
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(
            platform,
            f"Upstream returned status {status_code}",
            {"status_code": status_code, "body": body[:200]},
        )


class UpstreamRejectedError(UpstreamError, PermanentError):
    """Raised when the upstream payload reports ``success: false``."""

    def __init__(self, platform: str, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(
            platform,
            reason or "Upstream reported failure",
            {"reason": reason} if reason else None,
        )


class UpstreamInvalidResponseError(UpstreamError, PermanentError):
    """Raised when the upstream body is not a JSON object."""

    pass


# =============================================================================
# Normalization Outcome
# =============================================================================


class NoDownloadableMediaError(PermanentError):
    """Raised when the upstream succeeded but nothing could be downloaded."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(
            f"[{platform}] No download URLs in upstream response",
            {"platform": platform},
        )
