# tests/unit/test_retry_utils.py
"""Test retry utilities."""

import pytest

from cwtail.backends.retry_utils import (
    compute_backoff_delay,
    is_retryable_error,
    is_throttling_error,
    retry_with_exponential_backoff,
)
from cwtail.core.exceptions import BackendUnavailableError, ThrottledError


class TestComputeBackoffDelay:
    """Test the backoff schedule."""

    def test_doubles_per_attempt(self):
        delays = [compute_backoff_delay(n, 0.5, 100.0) for n in range(4)]
        assert delays == [0.5, 1.0, 2.0, 4.0]

    def test_capped(self):
        assert compute_backoff_delay(20, 1.0, 30.0) == 30.0

    def test_jitter_stays_within_half_to_full(self):
        for _ in range(50):
            delay = compute_backoff_delay(3, 1.0, 60.0, jitter=True)
            assert 4.0 <= delay <= 8.0


class TestRetryWithExponentialBackoff:
    """Test retry_with_exponential_backoff function."""

    @pytest.fixture
    def sleeps(self):
        return []

    @pytest.fixture
    def fake_sleep(self, sleeps):
        async def _sleep(delay):
            sleeps.append(delay)

        return _sleep

    @pytest.mark.asyncio
    async def test_successful_first_attempt(self, fake_sleep, sleeps):
        async def succeed():
            return "ok"

        result = await retry_with_exponential_backoff(succeed, sleep=fake_sleep)

        assert result == "ok"
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_retry_on_failure(self, fake_sleep, sleeps):
        """Test retry on failure with eventual success."""
        attempt_count = 0

        async def flaky(value):
            nonlocal attempt_count
            attempt_count += 1
            if attempt_count < 3:
                raise BackendUnavailableError("connection reset")
            return value

        result = await retry_with_exponential_backoff(
            flaky,
            "payload",
            max_retries=3,
            base_delay=0.5,
            jitter=False,
            sleep=fake_sleep,
        )

        assert result == "payload"
        assert attempt_count == 3
        assert sleeps == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_max_retries_exceeded(self, fake_sleep):
        async def always_fail():
            raise BackendUnavailableError("down")

        with pytest.raises(BackendUnavailableError, match="down"):
            await retry_with_exponential_backoff(
                always_fail, max_retries=2, sleep=fake_sleep
            )

    @pytest.mark.asyncio
    async def test_non_matching_error_not_retried(self, fake_sleep, sleeps):
        attempts = 0

        async def throttled():
            nonlocal attempts
            attempts += 1
            raise ThrottledError("filter_log_events")

        with pytest.raises(ThrottledError):
            await retry_with_exponential_backoff(
                throttled,
                max_retries=5,
                retry_on=(BackendUnavailableError,),
                sleep=fake_sleep,
            )

        assert attempts == 1
        assert sleeps == []


class TestErrorClassifiers:
    """Test message-based error classification."""

    @pytest.mark.parametrize(
        "message",
        [
            "Rate exceeded",
            "ThrottlingException: slow down",
            "429 Too Many Requests",
        ],
    )
    def test_throttling_messages(self, message):
        assert is_throttling_error(Exception(message))
        assert is_retryable_error(Exception(message))

    @pytest.mark.parametrize(
        "message",
        ["Read timeout on endpoint", "503 Service Unavailable", "Connection reset"],
    )
    def test_retryable_messages(self, message):
        assert is_retryable_error(Exception(message))
        assert not is_throttling_error(Exception(message))

    def test_permanent_errors(self):
        assert not is_retryable_error(Exception("AccessDeniedException"))
