"""Request pacing for backend API quotas."""

from collections import defaultdict, deque
from dataclasses import dataclass
from threading import Lock
from typing import Any, Deque, Dict, Optional

from ..config.config import Config
from ..constants import Operations, RateLimits
from ..io.logger import get_logger
from .clock import Clock

logger = get_logger("rate_limiter")


@dataclass
class RequestRecord:
    """Record of a request at a point in time."""

    timestamp: float
    operation: str
    waited: float = 0.0


class RequestRateLimiter:
    """Paces requests per backend operation.

    Every operation has its own requests-per-second quota. A caller reserves
    the next free slot under the lock and then sleeps outside it, so
    concurrent stream workers line up into an evenly spaced request train
    instead of bursting and getting throttled.
    """

    def __init__(self, config: Optional[Config] = None, clock: Optional[Clock] = None):
        """Initialize the rate limiter.

        Args:
            config: Application configuration
            clock: Clock used for timing and sleeping
        """
        self.config = config or Config()
        self.clock = clock or Clock()
        self.enabled = self.config.get("rate_limiting.enabled", True)
        self.safety_margin = self.config.get(
            "rate_limiting.safety_margin", RateLimits.SAFETY_MARGIN
        )
        self.rate_limits = self._load_limits()

        self.request_history: Dict[str, Deque[RequestRecord]] = defaultdict(
            lambda: deque(maxlen=RateLimits.MAX_REQUEST_HISTORY)
        )
        self.next_slot: Dict[str, float] = {}
        self.throttle_counts: Dict[str, int] = defaultdict(int)

        # Thread safety
        self.lock = Lock()

    def _load_limits(self) -> Dict[str, float]:
        """Load per-operation limits, letting config override the defaults."""
        limits = {
            Operations.FILTER_LOG_EVENTS: RateLimits.FILTER_LOG_EVENTS,
            Operations.DESCRIBE_LOG_STREAMS: RateLimits.DESCRIBE_LOG_STREAMS,
            Operations.DESCRIBE_LOG_GROUPS: RateLimits.DESCRIBE_LOG_GROUPS,
        }
        custom_limits = self.config.get("rate_limiting.requests_per_second", {}) or {}
        limits.update(custom_limits)
        return limits

    def _interval(self, operation: str) -> float:
        limit = self.rate_limits.get(operation, RateLimits.DESCRIBE_LOG_GROUPS)
        return 1.0 / (limit * self.safety_margin)

    async def acquire(self, operation: str) -> float:
        """Wait if needed before making a request.

        Args:
            operation: Backend operation about to be called

        Returns:
            How long we waited
        """
        if not self.enabled:
            return 0.0

        with self.lock:
            now = self.clock.monotonic()
            slot = max(now, self.next_slot.get(operation, now))
            self.next_slot[operation] = slot + self._interval(operation)
            wait_time = slot - now

        if wait_time > 0:
            logger.debug(f"Pacing {operation}: waiting {wait_time:.3f}s")
            await self.clock.sleep(wait_time)

        with self.lock:
            self.request_history[operation].append(
                RequestRecord(
                    timestamp=self.clock.monotonic(),
                    operation=operation,
                    waited=wait_time,
                )
            )

        return wait_time

    def record_throttle(self, operation: str) -> None:
        """Record that the backend throttled a request."""
        with self.lock:
            self.throttle_counts[operation] += 1
        logger.debug(
            f"Throttled on {operation} "
            f"({self.throttle_counts[operation]} throttles so far)"
        )

    def get_status(self, operation: str) -> Dict[str, Any]:
        """Get current pacing status for an operation."""
        cutoff = self.clock.monotonic() - 60
        with self.lock:
            recent_requests = len(
                [
                    r
                    for r in self.request_history.get(operation, [])
                    if r.timestamp >= cutoff
                ]
            )
            throttles = self.throttle_counts.get(operation, 0)

        return {
            "operation": operation,
            "enabled": self.enabled,
            "requests_per_second": self.rate_limits.get(operation),
            "recent_requests": recent_requests,
            "throttles": throttles,
        }
