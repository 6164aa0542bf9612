"""Pydantic models for API requests and responses.

This module defines the request/response schemas for the downloader API.
Download endpoints always answer with an envelope: ``success`` tells the
client whether ``data`` or ``error`` is present.
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from universal_downloader.normalization.schema import NormalizedResult


# =============================================================================
# Download Models
# =============================================================================


class DownloadRequest(BaseModel):
    """Request body for ``POST /api/{platform}``."""

    url: Optional[str] = Field(
        None,
        description="Public post URL to extract media from",
        json_schema_extra={"example": "https://www.tiktok.com/@user/video/7234567890"},
    )


class DownloadSuccessResponse(BaseModel):
    """Envelope for a successfully normalized result."""

    success: Literal[True] = True
    data: NormalizedResult = Field(..., description="Normalized media result")
    meta: dict[str, Any] = Field(
        default_factory=dict,
        description="Request metadata (platform, source URL, tweet id, ...)",
    )


class DownloadErrorResponse(BaseModel):
    """Envelope for a failed download request."""

    success: Literal[False] = False
    error: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(
        None,
        description="Diagnostic details, only populated in debug mode",
    )


# =============================================================================
# Health Models
# =============================================================================


class HealthStatus(BaseModel):
    """Individual service health status."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Service status"
    )
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    message: Optional[str] = Field(None, description="Additional status message")


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Overall system status"
    )
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Check timestamp",
    )
    services: dict[str, HealthStatus] = Field(
        default_factory=dict,
        description="Individual service statuses",
    )
    uptime_seconds: Optional[float] = Field(None, description="Server uptime in seconds")


# =============================================================================
# Error Models
# =============================================================================


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Optional[Any] = Field(None, description="Invalid value provided")
