"""Time bounds for a tail query."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .exceptions import InvalidRangeError
from .types import to_epoch_ms


@dataclass(frozen=True)
class TimeWindow:
    """Optional [start, end) pair of UTC instants bounding a query.

    An absent start means "from now"; an absent end means unbounded.
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self):
        if self.start is not None and self.end is not None:
            start_ms, end_ms = to_epoch_ms(self.start), to_epoch_ms(self.end)
            if start_ms >= end_ms:
                raise InvalidRangeError(start_ms, end_ms)

    @property
    def bounded(self) -> bool:
        return self.end is not None

    def resolve(self, now: datetime) -> Tuple[int, Optional[int]]:
        """Resolve to epoch milliseconds against the given instant.

        Args:
            now: Instant substituted for an absent start

        Returns:
            (start_ms, end_ms) where end_ms is None when unbounded

        Raises:
            InvalidRangeError: If an absent start resolves to or past the end
        """
        start_ms = to_epoch_ms(self.start if self.start is not None else now)
        end_ms = to_epoch_ms(self.end) if self.end is not None else None
        if end_ms is not None and start_ms >= end_ms:
            raise InvalidRangeError(start_ms, end_ms)
        return start_ms, end_ms

    @staticmethod
    def in_bounds(timestamp_ms: int, start_ms: int, end_ms: Optional[int]) -> bool:
        """Check a timestamp against resolved [start, end) bounds."""
        if timestamp_ms < start_ms:
            return False
        return end_ms is None or timestamp_ms < end_ms
