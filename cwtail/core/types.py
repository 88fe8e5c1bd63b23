"""Core data types for cwtail.

This module defines the records that flow through the tailing engine:
events fetched from the backend, the per-stream fetch state owned by the
merge scheduler, and the results that stream workers hand back to it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple


def to_epoch_ms(instant: datetime) -> int:
    """Convert an aware (or naive UTC) datetime to epoch milliseconds."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return int(instant.timestamp() * 1000)


def from_epoch_ms(epoch_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class LogEvent:
    """A single log event as returned by the backend.

    Attributes:
        event_id: Backend-assigned identifier, unique within its stream
        timestamp: Event time in epoch milliseconds (UTC)
        message: Raw message text
        stream_id: Name of the owning stream
        group_id: Name of the owning group
    """

    event_id: str
    timestamp: int
    message: str
    stream_id: str
    group_id: str

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the event within a session."""
        return (self.stream_id, self.event_id)

    @property
    def sort_key(self) -> Tuple[int, str, str]:
        """Global emit order: timestamp, then stream, then id."""
        return (self.timestamp, self.stream_id, self.event_id)

    @property
    def time(self) -> datetime:
        return from_epoch_ms(self.timestamp)


@dataclass
class ListPage:
    """One page of a paginated name listing."""

    names: List[str]
    next_token: Optional[str] = None


@dataclass
class EventPage:
    """One page of events as returned by a backend call."""

    events: List[LogEvent]
    next_token: Optional[str] = None


@dataclass
class FetchResult:
    """Result of a single bounded page fetch for one stream."""

    events: List[LogEvent]
    next_token: Optional[str]
    has_more: bool


@dataclass
class StreamCursor:
    """Per-stream fetch state, owned exclusively by the merge session.

    ``next_token`` is an opaque continuation token; it is only ever passed
    back to the backend. ``resume_from_ms`` seeds a fresh query once the
    stream has been read to its end, and ``high_water_ms`` is the newest
    timestamp fetched so far.
    """

    stream_id: str
    resume_from_ms: int
    next_token: Optional[str] = None
    last_emitted_timestamp: Optional[int] = None
    last_emitted_id: Optional[str] = None
    high_water_ms: Optional[int] = None
    exhausted: bool = False
    throttle_attempts: int = 0
    backoff_until: float = 0.0

    @property
    def has_pending_pages(self) -> bool:
        return self.next_token is not None

    @property
    def watermark_ms(self) -> int:
        """Lower bound on any timestamp this stream can still return."""
        if self.high_water_ms is None:
            return self.resume_from_ms
        return max(self.high_water_ms, self.resume_from_ms)


@dataclass
class StreamReport:
    """What one stream worker hands back to the scheduler after a cycle."""

    stream_id: str
    events: List[LogEvent] = field(default_factory=list)
    next_token: Optional[str] = None
    has_more: bool = False
    pages: int = 0
    throttled: bool = False
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return not self.throttled and self.error is None


@dataclass
class TailWarning:
    """Non-fatal problem surfaced to the caller while tailing."""

    message: str
    stream_id: Optional[str] = None
    error: Optional[Exception] = None


@dataclass
class CycleResult:
    """Events emitted by one poll cycle and whether the session is over."""

    cycle: int
    events: List[LogEvent] = field(default_factory=list)
    finished: bool = False
    cancelled: bool = False
