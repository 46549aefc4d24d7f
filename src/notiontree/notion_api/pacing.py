"""Request pacing and retry policy for the Notion transport.

Notion allows an integration an average of three requests per second and
answers bursts above that with ``429``.  A large append is a long run of
back-to-back calls, so the transport paces itself with
:class:`RequestPacer` and retries throttled or failed calls according to
:class:`RetryPolicy`.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass

import httpx

from notiontree.config import NotionTreeConfig

RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """When to retry a request and how long to wait first.

    Attributes
    ----------
    max_attempts:
        Total attempts per request, the first one included.
    base_delay:
        Delay before the second attempt; doubled for each later one.
    max_delay:
        Ceiling for the computed delay.
    jitter:
        Scale each computed delay to a random 50-100 % of its value.
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 60.0
    jitter: bool = True

    @classmethod
    def from_config(cls, config: NotionTreeConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
        )

    def is_retryable(self, status: int | None = None, error: Exception | None = None) -> bool:
        """Return ``True`` for a throttling or server status, or a network error."""
        if error is not None:
            return isinstance(error, RETRYABLE_ERRORS)
        return status in RETRYABLE_STATUSES

    def has_attempts_left(self, attempt: int) -> bool:
        """Return ``True`` if another try may follow the 0-indexed *attempt*."""
        return attempt + 1 < self.max_attempts

    def delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Seconds to wait after the 0-indexed *attempt* failed.

        A server ``Retry-After`` value replaces the exponential delay but is
        still jittered, so concurrent clients do not retry in lockstep.
        """
        if retry_after is not None:
            wait = retry_after
        else:
            wait = min(self.base_delay * (2 ** attempt), self.max_delay)
        if self.jitter:
            wait *= 0.5 + random.random() * 0.5
        return wait


class RequestPacer:
    """Spread requests evenly at *rate_rps*, allowing bursts of *burst*.

    Every request is given a slot ``1 / rate_rps`` seconds after the
    previous one.  Up to *burst* slots may be claimed ahead of time; a
    caller beyond that waits until its slot is within reach.

    Parameters
    ----------
    rate_rps:
        Sustained requests per second.
    burst:
        Requests that may be sent back to back after an idle period.
    """

    def __init__(self, rate_rps: float, burst: int = 10) -> None:
        if rate_rps <= 0:
            raise ValueError(f"rate_rps must be > 0, got {rate_rps}")
        if burst < 1:
            raise ValueError(f"burst must be >= 1, got {burst}")

        self.interval = 1.0 / rate_rps
        self.burst = burst
        self._next_slot = time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def backlog(self) -> float:
        """Seconds of already claimed slots that lie in the future."""
        return max(0.0, self._next_slot - time.monotonic())

    async def acquire(self) -> float:
        """Claim the next slot and wait for it.

        Returns the number of seconds waited (``0.0`` inside the burst).
        """
        async with self._lock:
            now = time.monotonic()
            slot = max(self._next_slot, now)
            self._next_slot = slot + self.interval
            wait = max(0.0, slot - now - (self.burst - 1) * self.interval)

        if wait > 0:
            await asyncio.sleep(wait)
        return wait
