"""
Monitoring and observability for the downloader service.

Provides Prometheus metrics for upstream calls, normalization outcomes,
and upstream endpoint breaker state.
"""

from universal_downloader.monitoring.metrics import (
    BREAKER_FAILURES,
    BREAKER_STATE,
    DOWNLOAD_ITEMS,
    NORMALIZATION_TOTAL,
    UPSTREAM_REQUEST_DURATION,
    UPSTREAM_REQUEST_TOTAL,
    get_metrics_app,
    record_breaker_failure,
    record_normalization,
    set_breaker_state,
    track_upstream_request,
)

__all__ = [
    "BREAKER_FAILURES",
    "BREAKER_STATE",
    "DOWNLOAD_ITEMS",
    "NORMALIZATION_TOTAL",
    "UPSTREAM_REQUEST_DURATION",
    "UPSTREAM_REQUEST_TOTAL",
    "get_metrics_app",
    "record_breaker_failure",
    "record_normalization",
    "set_breaker_state",
    "track_upstream_request",
]
