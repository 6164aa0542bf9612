"""Circuit breakers for the media extraction API, one per upstream endpoint.

Breakers are keyed by endpoint path, not by platform. Facebook and
Instagram both call ``/api/facebook-insta/download``, so failures seen
through either platform count against the same breaker and an outage
short-circuits both.

A breaker's state is derived from when it opened:

- closed: ``opened_at`` is unset; every request is admitted.
- open: less than ``recovery_timeout`` seconds since it opened; requests
  fail fast.
- half-open: the timeout has passed; a single trial request is admitted
  and its outcome closes or reopens the breaker.

Usage:
    breaker = get_breaker("/api/tiktok/download")

    if not breaker.allow_request("tiktok"):
        raise UpstreamUnavailableError(...)
    try:
        payload = await fetch()
    except RetryableError:
        breaker.record_failure("tiktok")
        raise
    breaker.record_success()
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import structlog

from universal_downloader.monitoring.metrics import (
    record_breaker_failure,
    set_breaker_state,
)

logger = structlog.get_logger(__name__)


class BreakerState(str, Enum):
    """Observable state of an endpoint breaker."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class EndpointBreaker:
    """Failure accounting for one upstream endpoint.

    The methods do not await, so calls from concurrent requests on one
    event loop never interleave and no lock is needed.

    Attributes:
        endpoint: Upstream path guarded by this breaker.
        failure_threshold: Consecutive failures that open the breaker.
        recovery_timeout: Seconds the breaker stays open before a trial.
        clock: Monotonic time source, replaceable in tests.
    """

    endpoint: str
    failure_threshold: int = 5
    recovery_timeout: float = 60.0
    clock: Callable[[], float] = time.monotonic

    consecutive_failures: int = field(default=0, init=False)
    opened_at: Optional[float] = field(default=None, init=False)
    trial_started_at: Optional[float] = field(default=None, init=False)
    platforms: set[str] = field(default_factory=set, init=False)

    @property
    def state(self) -> BreakerState:
        if self.opened_at is None:
            return BreakerState.CLOSED
        if self.clock() - self.opened_at < self.recovery_timeout:
            return BreakerState.OPEN
        return BreakerState.HALF_OPEN

    def retry_after(self) -> float:
        """Seconds until an open breaker admits a trial request."""
        if self.opened_at is None:
            return 0.0
        return max(0.0, self.recovery_timeout - (self.clock() - self.opened_at))

    def allow_request(self, platform: str) -> bool:
        """Decide whether a request from ``platform`` may go upstream.

        In the half-open state only one trial is admitted. A trial that never
        reports back (a cancelled request) frees its slot after another
        ``recovery_timeout``.
        """
        self.platforms.add(platform)
        state = self.state
        if state is BreakerState.CLOSED:
            return True
        if state is BreakerState.OPEN:
            return False

        now = self.clock()
        if (
            self.trial_started_at is not None
            and now - self.trial_started_at < self.recovery_timeout
        ):
            return False
        self.trial_started_at = now
        set_breaker_state(self.endpoint, BreakerState.HALF_OPEN.value)
        logger.info("breaker_trial_admitted", endpoint=self.endpoint, platform=platform)
        return True

    def record_success(self) -> None:
        """The endpoint answered; close the breaker and clear the count."""
        if self.opened_at is not None:
            logger.info("breaker_closed", endpoint=self.endpoint)
        self.consecutive_failures = 0
        self.opened_at = None
        self.trial_started_at = None
        set_breaker_state(self.endpoint, BreakerState.CLOSED.value)

    def record_failure(self, platform: str) -> None:
        """Count a transport failure or upstream error status.

        A failed trial reopens the breaker at once. Otherwise a closed breaker
        opens when the consecutive count reaches ``failure_threshold``.
        """
        self.consecutive_failures += 1
        record_breaker_failure(self.endpoint)

        if self.trial_started_at is not None:
            event = "breaker_reopened"
        elif self.opened_at is None and self.consecutive_failures >= self.failure_threshold:
            event = "breaker_opened"
        else:
            return

        self.opened_at = self.clock()
        self.trial_started_at = None
        set_breaker_state(self.endpoint, BreakerState.OPEN.value)
        logger.warning(
            event,
            endpoint=self.endpoint,
            platform=platform,
            consecutive_failures=self.consecutive_failures,
            recovery_timeout=self.recovery_timeout,
        )

    def reset(self) -> None:
        self.consecutive_failures = 0
        self.opened_at = None
        self.trial_started_at = None
        self.platforms.clear()
        set_breaker_state(self.endpoint, BreakerState.CLOSED.value)


# =============================================================================
# Breaker Registry
# =============================================================================


_breakers: dict[str, EndpointBreaker] = {}


def get_breaker(
    endpoint: str,
    failure_threshold: int = 5,
    recovery_timeout: float = 60.0,
) -> EndpointBreaker:
    """
    Get or create the breaker for an upstream endpoint.

    Thresholds apply only when the breaker is first created.

    Args:
        endpoint: Upstream path, e.g. "/api/facebook-insta/download"
        failure_threshold: Consecutive failures before opening
        recovery_timeout: Seconds before a trial request

    Returns:
        The shared breaker for that endpoint
    """
    breaker = _breakers.get(endpoint)
    if breaker is None:
        breaker = EndpointBreaker(
            endpoint=endpoint,
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
        )
        _breakers[endpoint] = breaker
    return breaker


def all_breakers() -> dict[str, EndpointBreaker]:
    """Snapshot of every breaker created so far, keyed by endpoint."""
    return dict(_breakers)


def reset_breakers() -> None:
    """Close and forget every breaker."""
    for breaker in _breakers.values():
        breaker.reset()
    _breakers.clear()
