"""In-memory backend for offline development and testing."""

import base64
from collections import defaultdict, deque
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple

from ..constants import Operations
from ..core.exceptions import GroupNotFoundError, StreamNotFoundError
from ..core.types import EventPage, ListPage, LogEvent
from .base import LogBackend


def _encode_token(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode()).decode()


def _decode_token(token: str) -> str:
    return base64.urlsafe_b64decode(token.encode()).decode()


class InMemoryBackend(LogBackend):
    """Deterministic backend holding groups, streams and events in memory.

    Pagination tokens are opaque strings; event pages resume strictly after
    the last returned event, so events appended between pages are still
    picked up in order. Failures can be queued per operation and stream to
    simulate throttling or outages.
    """

    def __init__(self, page_size: int = 100, list_page_size: int = 50):
        self.page_size = page_size
        self.list_page_size = list_page_size
        self.groups: Dict[str, Dict[str, List[LogEvent]]] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self._failures: Dict[Tuple[str, Optional[str]], Deque[Exception]] = (
            defaultdict(deque)
        )
        self._sequence: Dict[Tuple[str, str], int] = defaultdict(int)

    # Setup helpers

    def create_group(self, group: str) -> None:
        self.groups.setdefault(group, {})

    def create_stream(self, group: str, stream: str) -> None:
        self.create_group(group)
        self.groups[group].setdefault(stream, [])

    def delete_stream(self, group: str, stream: str) -> None:
        self.groups.get(group, {}).pop(stream, None)

    def put_events(
        self, group: str, stream: str, events: Iterable[Tuple[int, str]]
    ) -> List[LogEvent]:
        """Append (timestamp_ms, message) pairs to a stream.

        Returns:
            The stored events with their assigned ids
        """
        self.create_stream(group, stream)
        stored = []
        for timestamp, message in events:
            self._sequence[(group, stream)] += 1
            event = LogEvent(
                event_id=f"{self._sequence[(group, stream)]:012d}",
                timestamp=timestamp,
                message=message,
                stream_id=stream,
                group_id=group,
            )
            self.groups[group][stream].append(event)
            stored.append(event)
        self.groups[group][stream].sort(key=lambda e: (e.timestamp, e.event_id))
        return stored

    def inject_failure(
        self,
        operation: str,
        error: Exception,
        stream: Optional[str] = None,
        times: int = 1,
    ) -> None:
        """Make the next ``times`` calls of an operation raise ``error``."""
        for _ in range(times):
            self._failures[(operation, stream)].append(error)

    def call_count(self, operation: str, stream: Optional[str] = None) -> int:
        return sum(
            1
            for name, params in self.calls
            if name == operation
            and (stream is None or stream in (params.get("stream_names") or []))
        )

    def _maybe_fail(self, operation: str, stream: Optional[str] = None) -> None:
        for key in ((operation, stream), (operation, None)):
            queue = self._failures.get(key)
            if queue:
                raise queue.popleft()

    def _paginate_names(
        self, names: List[str], next_token: Optional[str], limit: Optional[int]
    ) -> ListPage:
        offset = int(_decode_token(next_token)) if next_token else 0
        size = limit or self.list_page_size
        page = names[offset : offset + size]
        more = offset + size < len(names)
        return ListPage(
            names=page, next_token=_encode_token(str(offset + size)) if more else None
        )

    # LogBackend interface

    async def describe_groups(
        self,
        prefix: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListPage:
        self.calls.append((Operations.DESCRIBE_LOG_GROUPS, {"prefix": prefix}))
        self._maybe_fail(Operations.DESCRIBE_LOG_GROUPS)
        names = sorted(g for g in self.groups if not prefix or g.startswith(prefix))
        return self._paginate_names(names, next_token, limit)

    async def describe_streams(
        self,
        group: str,
        prefix: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListPage:
        self.calls.append(
            (Operations.DESCRIBE_LOG_STREAMS, {"group": group, "prefix": prefix})
        )
        self._maybe_fail(Operations.DESCRIBE_LOG_STREAMS)
        if group not in self.groups:
            raise GroupNotFoundError(group)
        names = sorted(
            s for s in self.groups[group] if not prefix or s.startswith(prefix)
        )
        return self._paginate_names(names, next_token, limit)

    async def filter_events(
        self,
        group: str,
        stream_names: Optional[List[str]] = None,
        start_ms: Optional[int] = None,
        end_ms: Optional[int] = None,
        filter_pattern: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> EventPage:
        self.calls.append(
            (
                Operations.FILTER_LOG_EVENTS,
                {
                    "group": group,
                    "stream_names": stream_names,
                    "start_ms": start_ms,
                    "end_ms": end_ms,
                    "filter_pattern": filter_pattern,
                    "next_token": next_token,
                },
            )
        )
        stream = stream_names[0] if stream_names and len(stream_names) == 1 else None
        self._maybe_fail(Operations.FILTER_LOG_EVENTS, stream)

        if group not in self.groups:
            raise GroupNotFoundError(group)
        streams = self.groups[group]
        selected = stream_names or list(streams)
        for name in selected:
            if name not in streams:
                raise StreamNotFoundError(group, name)

        matching = sorted(
            (
                event
                for name in selected
                for event in streams[name]
                if (start_ms is None or event.timestamp >= start_ms)
                and (end_ms is None or event.timestamp < end_ms)
                and (not filter_pattern or filter_pattern in event.message)
            ),
            key=lambda e: e.sort_key,
        )

        if next_token:
            timestamp, rest = _decode_token(next_token).split("|", 1)
            stream_id, event_id = rest.rsplit("|", 1)
            after = (int(timestamp), stream_id, event_id)
            matching = [e for e in matching if e.sort_key > after]

        size = limit or self.page_size
        page = matching[:size]
        token = None
        if len(matching) > size:
            last = page[-1]
            token = _encode_token(f"{last.timestamp}|{last.stream_id}|{last.event_id}")
        return EventPage(events=page, next_token=token)
