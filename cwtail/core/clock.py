"""Clock and cancellation primitives for the poll loop.

Both are injected into the merge scheduler so tests can step the loop with
virtual time instead of real sleeps.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Optional

from .types import to_epoch_ms


class CancellationToken:
    """Cooperative cancellation signal shared by a tail session."""

    def __init__(self):
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Remember the loop so signal handlers can cancel thread-safely."""
        self._loop = loop

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        self._event.set()

    def cancel_threadsafe(self) -> None:
        """Request cancellation from a signal handler or another thread."""
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._event.set)
        else:
            self._event.set()

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until cancelled or the timeout elapses.

        Returns:
            True if cancellation was requested
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            pass
        return self._event.is_set()


class Clock:
    """Wall clock backed by the system time and the asyncio loop."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return to_epoch_ms(self.now())

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(
        self, seconds: float, cancel_token: Optional[CancellationToken] = None
    ) -> bool:
        """Sleep, waking early if the token is cancelled.

        Returns:
            True if the sleep ended because of cancellation
        """
        if cancel_token is None:
            await asyncio.sleep(max(0.0, seconds))
            return False
        return await cancel_token.wait(max(0.0, seconds))
