"""
Prometheus metrics for the downloader service.

Usage:
    from universal_downloader.monitoring.metrics import track_upstream_request

    with track_upstream_request("tiktok"):
        payload = await client.fetch_media("tiktok", "/api/tiktok/download", url)

    record_normalization("tiktok", item_count=3)
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.applications import Starlette
from starlette.responses import Response
from starlette.routing import Route


# =============================================================================
# Metric Definitions
# =============================================================================

UPSTREAM_REQUEST_TOTAL = Counter(
    "downloader_upstream_requests_total",
    "Total calls to third-party media APIs",
    ["platform", "status"],
)

UPSTREAM_REQUEST_DURATION = Histogram(
    "downloader_upstream_request_duration_seconds",
    "Duration of third-party media API calls, retries included",
    ["platform"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

NORMALIZATION_TOTAL = Counter(
    "downloader_normalization_total",
    "Normalization outcomes (nonempty or empty)",
    ["platform", "outcome"],
)

DOWNLOAD_ITEMS = Histogram(
    "downloader_download_items",
    "Number of download items per normalized result",
    ["platform"],
    buckets=[1, 2, 3, 5, 8, 13, 21],
)

BREAKER_STATE = Gauge(
    "downloader_upstream_breaker_state",
    "Upstream endpoint breaker state (0=closed, 1=half_open, 2=open)",
    ["endpoint"],
)

BREAKER_FAILURES = Counter(
    "downloader_upstream_breaker_failures_total",
    "Failures counted against upstream endpoint breakers",
    ["endpoint"],
)


# =============================================================================
# Tracking Helpers
# =============================================================================


@contextmanager
def track_upstream_request(platform: str) -> Generator[None, None, None]:
    """
    Context manager to track upstream call duration and status.

    Usage:
        with track_upstream_request("youtube"):
            response = await client.get(url)
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception as e:
        status = type(e).__name__
        raise
    finally:
        duration = time.perf_counter() - start_time
        UPSTREAM_REQUEST_TOTAL.labels(platform=platform, status=status).inc()
        UPSTREAM_REQUEST_DURATION.labels(platform=platform).observe(duration)


def record_normalization(platform: str, item_count: int) -> None:
    """Record the outcome of one normalization run."""
    outcome = "nonempty" if item_count else "empty"
    NORMALIZATION_TOTAL.labels(platform=platform, outcome=outcome).inc()
    if item_count:
        DOWNLOAD_ITEMS.labels(platform=platform).observe(item_count)


BREAKER_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


def set_breaker_state(endpoint: str, state: str) -> None:
    """
    Publish an endpoint breaker's state.

    Args:
        endpoint: Upstream path the breaker guards
        state: "closed", "half_open" or "open"
    """
    BREAKER_STATE.labels(endpoint=endpoint).set(BREAKER_STATE_VALUES.get(state, 0))


def record_breaker_failure(endpoint: str) -> None:
    BREAKER_FAILURES.labels(endpoint=endpoint).inc()


# =============================================================================
# Metrics Endpoint
# =============================================================================


async def metrics_endpoint(request) -> Response:
    """Prometheus metrics endpoint handler."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


def get_metrics_app() -> Starlette:
    """
    Get a Starlette app for serving metrics.

    Mounted at /metrics by the API application.
    """
    return Starlette(
        routes=[
            Route("/", metrics_endpoint),
        ]
    )
