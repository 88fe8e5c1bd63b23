"""Core tailing engine for cwtail."""

from .clock import CancellationToken, Clock
from .event_fetcher import EventFetcher
from .exceptions import (
    BackendError,
    BackendUnavailableError,
    CwTailError,
    GroupNotFoundError,
    InvalidFilterError,
    InvalidRangeError,
    NoMatchingStreamsError,
    StreamNotFoundError,
    ThrottledError,
)
from .filters import TextFilter
from .lister import Lister
from .merge_scheduler import MergeScheduler, MergeSession
from .rate_limiter import RequestRateLimiter
from .settings import TailSettings
from .stream_enumerator import StreamEnumerator
from .time_window import TimeWindow
from .types import (
    CycleResult,
    FetchResult,
    LogEvent,
    StreamCursor,
    StreamReport,
    TailWarning,
)

__all__ = [
    # Engine
    "MergeScheduler",
    "MergeSession",
    "StreamEnumerator",
    "EventFetcher",
    "Lister",
    "TimeWindow",
    "TextFilter",
    "TailSettings",
    "RequestRateLimiter",
    "Clock",
    "CancellationToken",
    # Types
    "LogEvent",
    "StreamCursor",
    "StreamReport",
    "FetchResult",
    "CycleResult",
    "TailWarning",
    # Errors
    "CwTailError",
    "InvalidRangeError",
    "InvalidFilterError",
    "BackendError",
    "BackendUnavailableError",
    "ThrottledError",
    "GroupNotFoundError",
    "StreamNotFoundError",
    "NoMatchingStreamsError",
]
