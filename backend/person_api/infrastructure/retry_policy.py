"""Retry Policy: bounded, fixed-backoff retry of transient outbound failures.

Invariants:
    - At most 1 + max_attempts tries per call
    - Transient (network error, 5xx, 408) and transport timeouts are retried
    - Terminal outcomes (success, other 4xx, anything else) are returned immediately
    - When attempts run out, the last transient outcome is returned as final
    - Waiting uses asyncio.sleep: suspends only the calling task

Design Decisions:
    - Attempts return an AttemptOutcome value instead of raising: classification is an
      explicit function over a closed tag set, not exception-type matching
    - Fixed backoff (not exponential): the configured delay is the whole policy
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from person_api.core.domain_types import OutcomeTag

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({408})


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int
    backoff_seconds: float

    def __post_init__(self):
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one attempt: exactly one of response or error is set."""
    response: httpx.Response | None = None
    error: Exception | None = None

    def describe(self) -> str:
        if self.response is not None:
            return f"HTTP {self.response.status_code}"
        return type(self.error).__name__


def classify_outcome(outcome: AttemptOutcome) -> OutcomeTag:
    """Map an attempt to TRANSIENT, TIMEOUT or TERMINAL."""
    if outcome.error is not None:
        if isinstance(outcome.error, httpx.TimeoutException):
            return OutcomeTag.TIMEOUT
        if isinstance(outcome.error, (httpx.NetworkError, httpx.RemoteProtocolError)):
            return OutcomeTag.TRANSIENT
        return OutcomeTag.TERMINAL
    status = outcome.response.status_code
    if status >= 500 or status in _TRANSIENT_STATUSES:
        return OutcomeTag.TRANSIENT
    return OutcomeTag.TERMINAL


class RetryPolicy:
    """Runs an attempt factory until a terminal outcome or attempts run out."""

    async def execute(
        self,
        operation: Callable[[], Awaitable[AttemptOutcome]],
        config: RetryConfig,
    ) -> AttemptOutcome:
        remaining = config.max_attempts
        attempt = 0
        while True:
            attempt += 1
            outcome = await operation()
            tag = classify_outcome(outcome)
            if tag is OutcomeTag.TERMINAL:
                return outcome
            if remaining <= 0:
                logger.warning(
                    f"Retries exhausted after {attempt} attempt(s): {outcome.describe()}",
                    extra={"attempt": attempt, "outcome": tag.value},
                )
                return outcome
            logger.warning(
                f"Transient outcome ({outcome.describe()}), "
                f"retry after {config.backoff_seconds}s (attempt {attempt})",
                extra={"attempt": attempt, "outcome": tag.value},
            )
            await asyncio.sleep(config.backoff_seconds)
            remaining -= 1
