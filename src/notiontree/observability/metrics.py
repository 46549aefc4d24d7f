"""Metrics hook protocol and no-op default implementation.

notiontree emits counters and timings around HTTP requests and the append
protocol.  By default a :class:`NoopMetricsHook` discards them; supply any
object satisfying :class:`MetricsHook` to route them to a real backend.

Emitted metric names:

* ``notiontree.requests_total``           -- counter
* ``notiontree.retries_total``            -- counter
* ``notiontree.rate_limited_total``       -- counter
* ``notiontree.request_duration_ms``      -- timing
* ``notiontree.rate_limit_wait_ms``       -- timing
* ``notiontree.append_calls_total``       -- counter
* ``notiontree.blocks_submitted_total``   -- counter
* ``notiontree.blocks_deferred_total``    -- counter
* ``notiontree.protocol_mismatch_total``  -- counter
* ``notiontree.page_create_total``        -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
