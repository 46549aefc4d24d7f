"""Unit tests for notion_api/pacing.py.

Targets:
  - RetryPolicy: from_config, is_retryable, has_attempts_left, delay
  - RequestPacer: slot scheduling and waits
"""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from notiontree.config import NotionTreeConfig
from notiontree.notion_api.pacing import RequestPacer, RetryPolicy

# ---------------------------------------------------------------------------
# RetryPolicy
# ---------------------------------------------------------------------------


class TestRetryPolicy:
    def test_from_config(self):
        config = NotionTreeConfig(
            token="tok",
            retry_max_attempts=7,
            retry_base_delay=0.5,
            retry_max_delay=9.0,
            retry_jitter=False,
        )
        assert RetryPolicy.from_config(config) == RetryPolicy(7, 0.5, 9.0, False)

    def test_attempts_left(self):
        policy = RetryPolicy(max_attempts=3)
        assert [policy.has_attempts_left(a) for a in range(4)] == [True, True, False, False]

    def test_single_attempt_never_retries(self):
        assert RetryPolicy(max_attempts=1).has_attempts_left(0) is False

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert RetryPolicy().is_retryable(status=status) is True

    @pytest.mark.parametrize("status", [200, 400, 401, 403, 404, 409])
    def test_non_retryable_statuses(self, status):
        assert RetryPolicy().is_retryable(status=status) is False

    def test_timeout_is_retryable(self):
        exc = httpx.ReadTimeout("timed out", request=MagicMock())
        assert RetryPolicy().is_retryable(error=exc) is True

    def test_connect_error_is_retryable(self):
        assert RetryPolicy().is_retryable(error=httpx.ConnectError("refused")) is True

    def test_other_error_is_not_retryable(self):
        assert RetryPolicy().is_retryable(error=RuntimeError("x")) is False

    def test_nothing_to_judge(self):
        assert RetryPolicy().is_retryable() is False

    @pytest.mark.parametrize("attempt,expected", [(0, 1.0), (1, 2.0), (2, 4.0), (3, 8.0)])
    def test_exponential_delay(self, attempt, expected):
        assert RetryPolicy(base_delay=1.0, jitter=False).delay(attempt) == expected

    def test_delay_capped(self):
        assert RetryPolicy(base_delay=1.0, max_delay=5.0, jitter=False).delay(10) == 5.0

    def test_retry_after_replaces_backoff(self):
        assert RetryPolicy(jitter=False).delay(3, retry_after=7.0) == 7.0

    def test_jitter_in_range(self):
        policy = RetryPolicy(base_delay=1.0)
        for _ in range(50):
            assert 2.0 <= policy.delay(2) <= 4.0

    def test_jitter_applies_to_retry_after(self):
        with patch("notiontree.notion_api.pacing.random.random", return_value=0.0):
            assert RetryPolicy().delay(0, retry_after=4.0) == 2.0


# ---------------------------------------------------------------------------
# RequestPacer
# ---------------------------------------------------------------------------


class TestRequestPacer:
    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            RequestPacer(rate_rps=0)

    def test_invalid_burst(self):
        with pytest.raises(ValueError):
            RequestPacer(rate_rps=1.0, burst=0)

    async def test_burst_goes_through_without_waiting(self):
        pacer = RequestPacer(rate_rps=1.0, burst=3)
        with patch("notiontree.notion_api.pacing.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            waits = [await pacer.acquire() for _ in range(3)]
        assert waits == [0.0, 0.0, 0.0]
        mock_sleep.assert_not_awaited()
        assert pacer.backlog == pytest.approx(3.0, abs=0.05)

    async def test_waits_once_burst_used(self):
        pacer = RequestPacer(rate_rps=2.0, burst=1)
        await pacer.acquire()
        with patch("notiontree.notion_api.pacing.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            wait = await pacer.acquire()
        assert wait == pytest.approx(0.5, abs=0.05)
        mock_sleep.assert_awaited_once()

    async def test_waits_grow_with_backlog(self):
        pacer = RequestPacer(rate_rps=10.0, burst=1)
        with patch("notiontree.notion_api.pacing.asyncio.sleep", new=AsyncMock()):
            waits = [await pacer.acquire() for _ in range(4)]
        assert waits[0] == 0.0
        assert waits[1] < waits[2] < waits[3]
        assert waits[3] == pytest.approx(0.3, abs=0.05)

    async def test_concurrent_acquires_within_burst(self):
        pacer = RequestPacer(rate_rps=1000.0, burst=5)
        waits = await asyncio.gather(*(pacer.acquire() for _ in range(5)))
        assert all(w == 0.0 for w in waits)
