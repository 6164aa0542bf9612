"""Health check endpoints for the downloader API.

Reports the third-party media API status and the state of each upstream
endpoint breaker.
"""

from datetime import datetime, timezone
import time
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from universal_downloader import __version__
from universal_downloader.api.dependencies import get_upstream_client
from universal_downloader.api.models import HealthCheckResponse, HealthStatus
from universal_downloader.core.circuit_breaker import BreakerState, all_breakers
from universal_downloader.upstream.client import UpstreamClient

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])

# Track server start time for uptime calculation
_server_start_time: Optional[float] = None


def set_server_start_time() -> None:
    """Set the server start time. Called on application startup."""
    global _server_start_time
    _server_start_time = time.time()


def get_uptime_seconds() -> Optional[float]:
    """Get server uptime in seconds."""
    if _server_start_time is None:
        return None
    return time.time() - _server_start_time


async def check_upstream_health(client: UpstreamClient) -> HealthStatus:
    """Check the third-party media API."""
    health = await client.health_check()
    if not health.healthy:
        logger.warning("upstream_health_check_failed", message=health.message)
    return HealthStatus(
        status="healthy" if health.healthy else "unhealthy",
        latency_ms=health.latency_ms,
        message=health.message,
    )


def check_breakers() -> dict[str, HealthStatus]:
    """Report every endpoint breaker that has been used, keyed ``breaker:<path>``."""
    services = {}
    for endpoint, breaker in all_breakers().items():
        used_by = ", ".join(sorted(breaker.platforms)) or "none"
        state = breaker.state
        if state is BreakerState.CLOSED:
            status, message = "healthy", "Breaker closed"
        elif state is BreakerState.HALF_OPEN:
            status, message = "degraded", "Breaker half-open, awaiting a trial request"
        else:
            status = "unhealthy"
            message = f"Breaker open. Retry in {breaker.retry_after():.1f}s"
        services[f"breaker:{endpoint}"] = HealthStatus(
            status=status,
            message=f"{message} (used by: {used_by})",
        )
    return services


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health Check",
    description="Check the health status of the API and its upstream.",
)
async def health_check(
    client: UpstreamClient = Depends(get_upstream_client),
) -> HealthCheckResponse:
    """
    Perform a health check of the service.

    Returns the status of:
    - The third-party media API
    - Each upstream endpoint breaker
    """
    services = {"upstream": await check_upstream_health(client)}
    services.update(check_breakers())

    # An open breaker degrades the service; it does not take it down.
    statuses = [s.status for s in services.values()]
    if all(s == "healthy" for s in statuses):
        overall_status = "healthy"
    elif services["upstream"].status == "unhealthy":
        overall_status = "unhealthy"
    else:
        overall_status = "degraded"

    return HealthCheckResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        services=services,
        uptime_seconds=get_uptime_seconds(),
    )


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness check for container orchestration.",
)
async def liveness() -> dict:
    """
    Simple liveness probe for Kubernetes/Cloud Run.

    Returns 200 if the service is alive.
    """
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get(
    "/health/ready",
    summary="Readiness Check",
    description="Check if the service is ready to accept traffic.",
)
async def readiness(
    client: UpstreamClient = Depends(get_upstream_client),
) -> dict:
    """
    Readiness probe for Kubernetes/Cloud Run.

    Returns 200 only if the third-party media API is reachable.
    """
    upstream_status = await check_upstream_health(client)

    if upstream_status.status == "unhealthy":
        raise HTTPException(
            status_code=503,
            detail="Service not ready: upstream unavailable",
        )

    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
