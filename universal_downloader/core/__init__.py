"""
Core infrastructure modules for the downloader service.

Provides common utilities used across the application:
- exceptions: Standardized exception hierarchy
- circuit_breaker: Per-endpoint breakers for the upstream API
- logging: structlog configuration
"""

from universal_downloader.core.exceptions import (
    DownloaderError,
    RetryableError,
    PermanentError,
    InvalidURLError,
    UnknownPlatformError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamConnectionError,
    UpstreamUnavailableError,
    UpstreamStatusError,
    UpstreamRejectedError,
    UpstreamInvalidResponseError,
    NoDownloadableMediaError,
)

from universal_downloader.core.circuit_breaker import (
    BreakerState,
    EndpointBreaker,
    all_breakers,
    get_breaker,
    reset_breakers,
)

from universal_downloader.core.logging import configure_logging

__all__ = [
    # Exceptions
    "DownloaderError",
    "RetryableError",
    "PermanentError",
    "InvalidURLError",
    "UnknownPlatformError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "UpstreamConnectionError",
    "UpstreamUnavailableError",
    "UpstreamStatusError",
    "UpstreamRejectedError",
    "UpstreamInvalidResponseError",
    "NoDownloadableMediaError",
    # Circuit Breaker
    "BreakerState",
    "EndpointBreaker",
    "all_breakers",
    "get_breaker",
    "reset_breakers",
    # Logging
    "configure_logging",
]
