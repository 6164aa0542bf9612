"""Async client for the third-party media extraction API.

Every platform endpoint takes the post URL as a ``url`` query parameter and
answers ``{"success": bool, "data": ..., "error": ...}``. The client adds a
wall-clock timeout, retries transient failures with incrementing backoff,
and keeps one circuit breaker per upstream endpoint.

Example:
    async with UpstreamClient() as client:
        payload = await client.fetch_media(
            "youtube", "/api/youtube/download", "https://youtu.be/abc"
        )
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from universal_downloader.config.settings import Settings, get_settings
from universal_downloader.core.circuit_breaker import EndpointBreaker, get_breaker
from universal_downloader.core.exceptions import (
    RetryableError,
    UpstreamConnectionError,
    UpstreamInvalidResponseError,
    UpstreamRejectedError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from universal_downloader.monitoring.metrics import track_upstream_request

logger = structlog.get_logger(__name__)

# Fragments httpx/OS resolvers put in name-resolution failures.
DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


def is_transient(exc: BaseException) -> bool:
    """Return True when a failed upstream call is worth retrying.

    Timeouts, connection errors and non-2xx statuses are retried; 404 is
    not, since the resource will still be missing on the next attempt.
    """
    if isinstance(exc, UpstreamStatusError):
        return exc.status_code != 404
    return isinstance(exc, RetryableError)


def _rejection_reason(payload: dict[str, Any]) -> Optional[str]:
    error = payload.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    for reason in (error, payload.get("message")):
        if isinstance(reason, str) and reason.strip():
            return reason.strip()
    return None


@dataclass
class UpstreamHealth:
    """Result of the upstream health probe."""

    healthy: bool
    latency_ms: Optional[float]
    message: str


class UpstreamClient:
    """Async client for the media extraction API with retries.

    Args:
        settings: Source of defaults for every other argument.
        base_url: API base URL.
        timeout: Per-call timeout in seconds.
        max_retries: Retries after the first attempt.
        retry_backoff: Backoff step in seconds (retry n waits n * step).
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self._settings = settings
        self._base_url = (base_url or settings.upstream_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self._max_retries = (
            max_retries if max_retries is not None else settings.upstream_max_retries
        )
        self._retry_backoff = (
            retry_backoff
            if retry_backoff is not None
            else settings.upstream_retry_backoff_seconds
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "UpstreamClient":
        """Enter async context manager."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": self._settings.user_agent,
                },
                transport=self._transport,
            )
        return self._client

    def breaker(self, path: str) -> EndpointBreaker:
        """Return the breaker guarding an endpoint path."""
        return get_breaker(
            path,
            failure_threshold=self._settings.circuit_breaker_failure_threshold,
            recovery_timeout=self._settings.circuit_breaker_recovery_timeout,
        )

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def _send(
        self,
        platform: str,
        path: str,
        params: dict[str, str],
        headers: Optional[dict[str, str]],
    ) -> httpx.Response:
        """Make one GET request, mapping transport failures to our errors."""
        client = await self._ensure_client()
        url = f"{self._base_url}{path}"

        try:
            # httpx timeouts are per phase; wait_for bounds the whole call.
            response = await asyncio.wait_for(
                client.get(url, params=params, headers=headers),
                timeout=self._timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning("upstream_timeout", platform=platform, path=path, error=str(e))
            raise UpstreamTimeoutError(
                platform,
                f"Request timeout: {e}",
                {"path": path},
            )
        except httpx.RequestError as e:
            text = str(e).lower()
            dns_failure = any(marker in text for marker in DNS_FAILURE_MARKERS)
            logger.warning(
                "upstream_request_error",
                platform=platform,
                path=path,
                error=str(e),
                dns_failure=dns_failure,
            )
            raise UpstreamConnectionError(
                platform,
                f"Request failed: {e}",
                {"path": path, "original_error": str(e)},
                dns_failure=dns_failure,
            )

        if not response.is_success:
            logger.warning(
                "upstream_status_error",
                platform=platform,
                path=path,
                status_code=response.status_code,
            )
            raise UpstreamStatusError(platform, response.status_code, response.text)

        return response

    async def _get_with_retry(
        self,
        platform: str,
        path: str,
        params: dict[str, str],
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        def log_retry(retry_state: RetryCallState) -> None:
            logger.warning(
                "upstream_retry",
                platform=platform,
                attempt=retry_state.attempt_number,
                error=str(retry_state.outcome.exception()),
            )

        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_incrementing(
                start=self._retry_backoff,
                increment=self._retry_backoff,
            ),
            before_sleep=log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._send(platform, path, params, headers)
        raise AssertionError("unreachable")  # pragma: no cover

    async def fetch_media(
        self,
        platform: str,
        path: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """Fetch the extraction payload for a post URL.

        Args:
            platform: Platform name, used for logging and errors.
            path: Endpoint path (e.g. "/api/spotify").
            url: Public post URL to extract.
            headers: Extra request headers.

        Returns:
            The decoded payload, whose ``success`` flag is true.

        Raises:
            UpstreamUnavailableError: When the endpoint's breaker is open.
            UpstreamTimeoutError: When every attempt timed out.
            UpstreamConnectionError: When the host could not be reached.
            UpstreamStatusError: On a non-2xx final status.
            UpstreamInvalidResponseError: When the body is not a JSON object.
            UpstreamRejectedError: When the payload reports failure.
        """
        breaker = self.breaker(path)
        if not breaker.allow_request(platform):
            retry_after = breaker.retry_after()
            logger.warning(
                "upstream_breaker_open",
                platform=platform,
                endpoint=path,
                retry_after=retry_after,
            )
            raise UpstreamUnavailableError(
                platform,
                f"Breaker open for {path}. Retry in {retry_after:.1f}s",
                {"endpoint": path, "retry_after": retry_after},
            )

        logger.info("upstream_fetch", platform=platform, path=path, url=url)

        with track_upstream_request(platform):
            try:
                response = await self._get_with_retry(
                    platform, path, {"url": url}, headers
                )
            except UpstreamStatusError as e:
                # A missing post is not an upstream outage.
                if e.status_code == 404:
                    breaker.record_success()
                else:
                    breaker.record_failure(platform)
                raise
            except RetryableError:
                breaker.record_failure(platform)
                raise

            breaker.record_success()
            return self._decode(platform, response)

    def _decode(self, platform: str, response: httpx.Response) -> dict[str, Any]:
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            raise UpstreamInvalidResponseError(
                platform,
                "Invalid content type returned",
                {"content_type": content_type},
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamInvalidResponseError(
                platform,
                f"Malformed JSON: {e}",
            )
        if not isinstance(payload, dict):
            raise UpstreamInvalidResponseError(
                platform,
                "Expected a JSON object",
                {"type": type(payload).__name__},
            )
        if not payload.get("success"):
            reason = _rejection_reason(payload)
            logger.info("upstream_rejected", platform=platform, reason=reason)
            raise UpstreamRejectedError(platform, reason)
        return payload

    async def resolve_redirects(self, url: str) -> str:
        """Follow redirects from a short link and return the final URL.

        Falls back to the input URL when the link cannot be fetched.
        """
        client = await self._ensure_client()
        try:
            response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning("short_url_resolution_failed", url=url, error=str(e))
            return url
        resolved = str(response.url) or url
        logger.debug("short_url_resolved", url=url, resolved=resolved)
        return resolved

    async def health_check(self) -> UpstreamHealth:
        """Probe the upstream ``/health`` endpoint."""
        client = await self._ensure_client()
        start_time = time.time()
        try:
            response = await client.get(
                f"{self._base_url}/health",
                timeout=self._settings.health_timeout_seconds,
            )
        except httpx.HTTPError as e:
            return UpstreamHealth(
                healthy=False,
                latency_ms=None,
                message=f"Upstream unreachable: {str(e)[:100]}",
            )
        latency = (time.time() - start_time) * 1000
        return UpstreamHealth(
            healthy=response.is_success,
            latency_ms=round(latency, 2),
            message=f"Upstream responded with status {response.status_code}",
        )
