"""Tests for the clock and cancellation token."""

import asyncio

import pytest

from cwtail.config import Config
from cwtail.core.clock import CancellationToken, Clock
from cwtail.core.settings import TailSettings


class TestCancellationToken:
    """Test CancellationToken."""

    @pytest.mark.asyncio
    async def test_wait_times_out(self):
        token = CancellationToken()
        assert await token.wait(0.01) is False
        assert not token.cancelled

    @pytest.mark.asyncio
    async def test_wait_returns_on_cancel(self):
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)

        assert await asyncio.wait_for(token.wait(), timeout=5) is True

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert await token.wait(0) is True

    @pytest.mark.asyncio
    async def test_cancel_from_thread(self):
        token = CancellationToken()
        loop = asyncio.get_running_loop()
        token.bind_loop(loop)

        await loop.run_in_executor(None, token.cancel_threadsafe)

        assert await asyncio.wait_for(token.wait(), timeout=5) is True


class TestClock:
    """Test the wall clock."""

    def test_now_is_utc(self):
        clock = Clock()
        assert clock.now().utcoffset().total_seconds() == 0
        assert abs(clock.now_ms() - clock.now().timestamp() * 1000) < 1000

    @pytest.mark.asyncio
    async def test_sleep_without_token(self):
        assert await Clock().sleep(0) is False

    @pytest.mark.asyncio
    async def test_sleep_interrupted_by_cancel(self):
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)

        cancelled = await asyncio.wait_for(Clock().sleep(30, token), timeout=5)

        assert cancelled is True


class TestTailSettings:
    """Test settings resolved from configuration."""

    def test_from_config(self):
        config = Config()
        config.set("tail.page_size", 500)
        config.set("retry.jitter", False)

        settings = TailSettings.from_config(config)

        assert settings.page_size == 500
        assert settings.jitter is False
        assert settings.poll_interval == config.get("tail.poll_interval")
        assert settings.max_attempts == config.get("retry.max_attempts")
