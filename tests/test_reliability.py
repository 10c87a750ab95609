"""
Test suite for reliability patterns.

Validates retry logic, batched execution and performance tracking.
"""

import asyncio
from unittest.mock import patch

import pytest

from siteaudit.core.exceptions import ExternalServiceError, RateLimitError
from siteaudit.utils.reliability import run_in_batches, track_performance, with_retry


@pytest.fixture(autouse=True)
def no_backoff_sleep():
    """Skip the real backoff waits between sync attempts."""
    with patch("tenacity.nap.time.sleep"):
        yield


class TestRetryLogic:
    """Test retry mechanisms."""

    def test_retry_succeeds_after_failures(self):
        """Test retry succeeds after initial failures."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(ValueError,))
        def flaky_func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError("Not ready yet")
            return "success"

        assert flaky_func() == "success"
        assert call_count == 3

    def test_retry_reraises_after_max_attempts(self):
        """Test the last error is raised once attempts run out."""
        call_count = 0

        @with_retry(max_attempts=2, retry_exceptions=(ValueError,))
        def always_fail():
            nonlocal call_count
            call_count += 1
            raise ValueError("Always fails")

        with pytest.raises(ValueError, match="Always fails"):
            always_fail()
        assert call_count == 2

    def test_other_exceptions_are_not_retried(self):
        """Test only the listed exception types are retried."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(RateLimitError,))
        def broken():
            nonlocal call_count
            call_count += 1
            raise ExternalServiceError("svc", "HTTP 500", 500)

        with pytest.raises(ExternalServiceError):
            broken()
        assert call_count == 1

    def test_async_retry(self):
        """Test coroutines are retried the same way."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(RateLimitError,))
        async def rate_limited():
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise RateLimitError("slow down")
            return call_count

        assert asyncio.run(rate_limited()) == 2


class TestRunInBatches:
    """Test batched concurrent execution."""

    def test_results_follow_input_order(self):
        """Test results line up with inputs across batches."""

        async def double(x):
            return x * 2

        assert asyncio.run(run_in_batches([1, 2, 3, 4, 5], double, batch_size=2, delay=0)) == [2, 4, 6, 8, 10]

    def test_failures_become_none(self):
        """Test one failing item does not stop the others."""

        async def flaky(x):
            if x == 2:
                raise ExternalServiceError("svc", "boom")
            return x

        assert asyncio.run(run_in_batches([1, 2, 3], flaky, batch_size=3, delay=0)) == [1, None, 3]

    def test_batch_size_bounds_concurrency(self):
        """Test no more than batch_size calls are in flight."""
        in_flight = 0
        peak = 0

        async def work(x):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return x

        asyncio.run(run_in_batches(list(range(7)), work, batch_size=3, delay=0))
        assert peak == 3

    def test_empty_input(self):
        """Test nothing to do."""

        async def never(x):
            raise AssertionError("not called")

        assert asyncio.run(run_in_batches([], never)) == []


class TestTrackPerformance:
    """Test performance tracking."""

    def test_sync_result_passes_through(self):
        """Test the wrapped value is returned unchanged."""

        @track_performance("sum")
        def add(a, b):
            return a + b

        assert add(2, 3) == 5

    def test_async_errors_propagate(self):
        """Test failures are logged and re-raised."""

        @track_performance("failing")
        async def fail():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            asyncio.run(fail())
