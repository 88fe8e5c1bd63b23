"""Merge scheduler: drives poll cycles across streams and emits one ordered sequence.

A session fans out one worker per due stream each cycle and joins them at a
barrier. Workers only read their cursor's token and hand back a report; the
session alone mutates cursors, the seen set and the pending pool.
"""

import asyncio
import contextlib
from typing import (
    TYPE_CHECKING,
    AsyncIterator,
    Callable,
    Dict,
    List,
    Optional,
    Set,
    Tuple,
)

from ..backends.retry_utils import (
    compute_backoff_delay,
    retry_with_exponential_backoff,
)
from ..io.logger import get_logger
from .clock import CancellationToken, Clock
from .event_fetcher import EventFetcher
from .exceptions import (
    BackendError,
    BackendUnavailableError,
    NoMatchingStreamsError,
    StreamNotFoundError,
    ThrottledError,
)
from .filters import TextFilter
from .lister import Lister
from .rate_limiter import RequestRateLimiter
from .settings import TailSettings
from .stream_enumerator import StreamEnumerator, split_pattern
from .time_window import TimeWindow
from .types import CycleResult, LogEvent, StreamCursor, StreamReport, TailWarning

if TYPE_CHECKING:
    from ..backends.base import LogBackend

logger = get_logger("merge_scheduler")

WarningCallback = Callable[[TailWarning], None]


class MergeSession:
    """Run state of a single tail call.

    ``start()`` resolves the window and the initial stream set; each
    ``poll_cycle()`` then performs one refresh/fetch/merge/emit round.
    Events are buffered in a pending pool. A stream that has not yet been
    read to its end (first fetch outstanding, or a continuation token left)
    holds back everything at or after its watermark, so emitted events never
    go backwards in time.
    """

    def __init__(
        self,
        group: str,
        stream_pattern: Optional[str],
        window: TimeWindow,
        follow: bool,
        text_filter: TextFilter,
        enumerator: StreamEnumerator,
        fetcher: EventFetcher,
        settings: TailSettings,
        clock: Clock,
        cancel_token: CancellationToken,
        on_warning: Optional[WarningCallback] = None,
    ):
        self.group = group
        self.stream_pattern = stream_pattern
        self.window = window
        self.follow = follow
        self.text_filter = text_filter
        self.enumerator = enumerator
        self.fetcher = fetcher
        self.settings = settings
        self.clock = clock
        self.cancel_token = cancel_token
        self.on_warning = on_warning
        self.single_stream = split_pattern(stream_pattern)[0] == "exact"

        self.start_ms: Optional[int] = None
        self.end_ms: Optional[int] = None
        self.cycle = 0
        self.finished = False

        self.cursors: Dict[str, StreamCursor] = {}
        self.seen: Dict[str, Dict[str, int]] = {}
        self.pending: Dict[Tuple[str, str], LogEvent] = {}
        self.resume_points: Dict[str, int] = {}
        self.dropped: Set[str] = set()
        self.max_fetched_ms: Optional[int] = None
        self._end_passed = False

    @property
    def started(self) -> bool:
        return self.start_ms is not None

    async def start(self) -> None:
        """Resolve the window and the initial set of streams.

        Raises:
            InvalidRangeError: If the window resolves to an empty range
            GroupNotFoundError: If the group does not exist
            StreamNotFoundError: If an exact stream does not exist
            NoMatchingStreamsError: If the pattern matches no streams
            ThrottledError, BackendUnavailableError: If listing keeps failing
        """
        self.start_ms, self.end_ms = self.window.resolve(self.clock.now())

        names = await retry_with_exponential_backoff(
            self.enumerator.resolve,
            self.group,
            self.stream_pattern,
            max_retries=self.settings.max_attempts,
            base_delay=self.settings.base_delay,
            max_delay=self.settings.max_delay,
            jitter=self.settings.jitter,
            retry_on=(ThrottledError, BackendUnavailableError),
            sleep=self.clock.sleep,
        )
        if not names:
            raise NoMatchingStreamsError(self.group, self.stream_pattern or "*")

        for name in sorted(names):
            self._add_cursor(name)

        logger.info(
            f"Tailing {len(names)} streams in {self.group} "
            f"from {self.start_ms} to {self.end_ms or 'unbounded'} "
            f"(follow={self.follow})"
        )

    async def poll_cycle(self) -> CycleResult:
        """Run one refresh/fetch/merge/emit round.

        Raises:
            StreamNotFoundError: If a single named stream has disappeared
        """
        if not self.started:
            raise RuntimeError("MergeSession.start() must be awaited first")
        if self.finished:
            return CycleResult(cycle=self.cycle, finished=True)
        if self.cancel_token.cancelled:
            self.finished = True
            return CycleResult(cycle=self.cycle, finished=True, cancelled=True)

        self.cycle += 1
        refresh_every = max(1, self.settings.refresh_every_cycles)
        if self.follow and self.cycle > 1 and (self.cycle - 1) % refresh_every == 0:
            await self._refresh()

        now_ms = self.clock.now_ms()
        due = self._due_cursors()
        reports = await self._run_workers(due)
        if reports is None:
            logger.debug(f"Cycle {self.cycle} cancelled, discarding its results")
            self.finished = True
            return CycleResult(cycle=self.cycle, finished=True, cancelled=True)

        for report in reports:
            self._apply(report)

        events = self._drain()
        self._end_passed = self.end_ms is not None and (
            now_ms >= self.end_ms
            or (self.max_fetched_ms is not None and self.max_fetched_ms >= self.end_ms)
        )
        self.finished = not self.follow and self._is_complete()

        logger.debug(
            f"Cycle {self.cycle}: fetched {len(due)} streams, emitted {len(events)}, "
            f"pending {len(self.pending)}, finished={self.finished}"
        )
        return CycleResult(cycle=self.cycle, events=events, finished=self.finished)

    def idle_delay(self) -> float:
        """Seconds to wait before the next cycle."""
        now = self.clock.monotonic()
        waits = [
            max(0.0, cursor.backoff_until - now)
            for cursor in self.cursors.values()
            if cursor.has_pending_pages or not cursor.exhausted
        ]
        if not waits:
            return self.settings.poll_interval
        return min(min(waits), self.settings.poll_interval)

    # Cursor bookkeeping

    def _add_cursor(self, stream_id: str) -> None:
        resume_from = self.resume_points.pop(stream_id, self.start_ms)
        self.cursors[stream_id] = StreamCursor(
            stream_id=stream_id, resume_from_ms=resume_from
        )

    def _remove_cursor(self, stream_id: str) -> None:
        cursor = self.cursors.pop(stream_id)
        self.resume_points[stream_id] = cursor.watermark_ms

    def _drop(self, stream_id: str, error: Exception) -> None:
        self.cursors.pop(stream_id, None)
        self.dropped.add(stream_id)
        self._warn(f"Dropping stream {stream_id}: {error}", stream_id, error)

    def _warn(
        self,
        message: str,
        stream_id: Optional[str] = None,
        error: Optional[Exception] = None,
    ) -> None:
        logger.warning(message)
        if self.on_warning:
            self.on_warning(
                TailWarning(message=message, stream_id=stream_id, error=error)
            )

    async def _refresh(self) -> None:
        try:
            names = await self.enumerator.resolve(self.group, self.stream_pattern)
        except StreamNotFoundError:
            # The named stream is the whole session
            raise
        except BackendError as e:
            logger.warning(f"Stream refresh failed, keeping current streams: {e}")
            return

        for name in sorted(names - set(self.cursors) - self.dropped):
            logger.info(f"New stream discovered: {name}")
            self._add_cursor(name)
        for name in sorted(set(self.cursors) - names):
            logger.info(f"Stream no longer present: {name}")
            self._remove_cursor(name)

    def _due_cursors(self) -> List[StreamCursor]:
        now = self.clock.monotonic()
        due = []
        for stream_id in sorted(self.cursors):
            cursor = self.cursors[stream_id]
            if cursor.backoff_until > now:
                continue
            if cursor.has_pending_pages or not cursor.exhausted:
                due.append(cursor)
            elif self.follow and (self.end_ms is None or not self._end_passed):
                due.append(cursor)
            elif not self.follow and self.end_ms is not None and not self._end_passed:
                due.append(cursor)
        return due

    # Fan-out and barrier

    async def _fetch_stream(
        self, stream_id: str, next_token: Optional[str], start_ms: int
    ) -> StreamReport:
        report = StreamReport(stream_id=stream_id, next_token=next_token)
        token = next_token
        while report.pages < self.settings.page_budget_per_cycle:
            try:
                result = await retry_with_exponential_backoff(
                    self.fetcher.fetch_page,
                    self.group,
                    stream_id,
                    token,
                    start_ms,
                    self.end_ms,
                    self.text_filter.server_pattern,
                    max_retries=self.settings.max_attempts,
                    base_delay=self.settings.base_delay,
                    max_delay=self.settings.max_delay,
                    jitter=self.settings.jitter,
                    retry_on=(BackendUnavailableError,),
                    sleep=self.clock.sleep,
                )
            except ThrottledError:
                report.throttled = True
                break
            except BackendError as e:
                report.error = e
                break

            report.pages += 1
            report.events.extend(result.events)
            token = result.next_token
            report.next_token = token
            report.has_more = result.has_more
            if not result.has_more:
                break
        return report

    async def _run_workers(
        self, cursors: List[StreamCursor]
    ) -> Optional[List[StreamReport]]:
        """Fetch all due streams concurrently and wait for every report.

        Returns:
            The reports, or None if cancellation arrived before the barrier
        """
        if not cursors:
            return []

        barrier = asyncio.gather(
            *(
                self._fetch_stream(c.stream_id, c.next_token, c.resume_from_ms)
                for c in cursors
            )
        )
        cancel_wait = asyncio.ensure_future(self.cancel_token.wait())
        try:
            done, _ = await asyncio.wait(
                {barrier, cancel_wait}, return_when=asyncio.FIRST_COMPLETED
            )
            if barrier in done and not self.cancel_token.cancelled:
                return barrier.result()

            # Give in-flight fetches a moment to settle before abandoning them
            await asyncio.wait({barrier}, timeout=self.settings.cancel_grace_period)
            return None
        finally:
            cancel_wait.cancel()
            if not barrier.done():
                barrier.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await barrier

    # Merge

    def _apply(self, report: StreamReport) -> None:
        cursor = self.cursors.get(report.stream_id)
        if cursor is None:
            return

        self._buffer(cursor, report.events)

        if report.error is not None:
            if self.single_stream and isinstance(report.error, StreamNotFoundError):
                raise report.error
            self._drop(report.stream_id, report.error)
            return

        cursor.next_token = report.next_token
        if report.throttled:
            cursor.throttle_attempts += 1
            delay = compute_backoff_delay(
                cursor.throttle_attempts - 1,
                self.settings.base_delay,
                self.settings.throttle_max_delay,
                self.settings.jitter,
            )
            cursor.backoff_until = self.clock.monotonic() + delay
            logger.info(
                f"Stream {cursor.stream_id} throttled, backing off {delay:.1f}s "
                f"(attempt {cursor.throttle_attempts})"
            )
            return

        cursor.throttle_attempts = 0
        cursor.backoff_until = 0.0
        if cursor.next_token is None:
            cursor.exhausted = True
            cursor.resume_from_ms = cursor.watermark_ms
            self._prune_seen(cursor)

    def _buffer(self, cursor: StreamCursor, events: List[LogEvent]) -> None:
        for event in events:
            if cursor.high_water_ms is None or event.timestamp > cursor.high_water_ms:
                cursor.high_water_ms = event.timestamp
            if self.max_fetched_ms is None or event.timestamp > self.max_fetched_ms:
                self.max_fetched_ms = event.timestamp

            if event.key in self.pending:
                continue
            if event.event_id in self.seen.get(event.stream_id, {}):
                continue
            if not TimeWindow.in_bounds(event.timestamp, self.start_ms, self.end_ms):
                continue
            if not self.text_filter.matches(event.message):
                continue
            self.pending[event.key] = event

    def _drain(self) -> List[LogEvent]:
        holds = [
            cursor.watermark_ms
            for cursor in self.cursors.values()
            if cursor.has_pending_pages or not cursor.exhausted
        ]
        limit = min(holds) if holds else None

        ready = sorted(
            (e for e in self.pending.values() if limit is None or e.timestamp < limit),
            key=lambda e: e.sort_key,
        )
        for event in ready:
            del self.pending[event.key]
            self.seen.setdefault(event.stream_id, {})[event.event_id] = event.timestamp
            cursor = self.cursors.get(event.stream_id)
            if cursor is not None:
                cursor.last_emitted_timestamp = event.timestamp
                cursor.last_emitted_id = event.event_id
        return ready

    def _prune_seen(self, cursor: StreamCursor) -> None:
        seen = self.seen.get(cursor.stream_id)
        if seen:
            self.seen[cursor.stream_id] = {
                event_id: ts
                for event_id, ts in seen.items()
                if ts >= cursor.resume_from_ms
            }

    def _is_complete(self) -> bool:
        if self.pending:
            return False
        if not self.cursors:
            return True
        if any(c.has_pending_pages or not c.exhausted for c in self.cursors.values()):
            return False
        return self.end_ms is None or self._end_passed


class MergeScheduler:
    """Entry point of the tailing engine.

    Example:
        scheduler = MergeScheduler(CloudWatchBackend(region="eu-west-1"))
        async for event in scheduler.tail("/app/web", "web-*", TimeWindow(start)):
            print(event.message)
    """

    def __init__(
        self,
        backend: "LogBackend",
        rate_limiter: Optional[RequestRateLimiter] = None,
        settings: Optional[TailSettings] = None,
        clock: Optional[Clock] = None,
        cancel_token: Optional[CancellationToken] = None,
        on_warning: Optional[WarningCallback] = None,
        enumerator: Optional[StreamEnumerator] = None,
        fetcher: Optional[EventFetcher] = None,
    ):
        self.backend = backend
        self.rate_limiter = rate_limiter
        self.settings = settings or TailSettings()
        self.clock = clock or Clock()
        self.cancel_token = cancel_token or CancellationToken()
        self.on_warning = on_warning
        self.enumerator = enumerator or StreamEnumerator(backend, rate_limiter)
        self.fetcher = fetcher or EventFetcher(
            backend, rate_limiter, self.settings.page_size
        )
        self.lister = Lister(backend, self.enumerator, rate_limiter, self.settings)

    def open_session(
        self,
        group: str,
        stream_pattern: Optional[str] = None,
        window: Optional[TimeWindow] = None,
        follow: bool = False,
        text_filter: Optional[TextFilter] = None,
    ) -> MergeSession:
        """Create a session that can be stepped one cycle at a time."""
        return MergeSession(
            group=group,
            stream_pattern=stream_pattern,
            window=window or TimeWindow(),
            follow=follow,
            text_filter=text_filter or TextFilter(),
            enumerator=self.enumerator,
            fetcher=self.fetcher,
            settings=self.settings,
            clock=self.clock,
            cancel_token=self.cancel_token,
            on_warning=self.on_warning,
        )

    async def tail(
        self,
        group: str,
        stream_pattern: Optional[str] = None,
        window: Optional[TimeWindow] = None,
        follow: bool = False,
        text_filter: Optional[TextFilter] = None,
    ) -> AsyncIterator[LogEvent]:
        """Yield events from every matching stream in global time order.

        Without ``follow`` the sequence ends once every stream is read to
        the end of the window. With ``follow`` it only ends on cancellation.
        """
        session = self.open_session(group, stream_pattern, window, follow, text_filter)
        await session.start()

        while True:
            result = await session.poll_cycle()
            for event in result.events:
                yield event
            if result.finished or self.cancel_token.cancelled:
                return
            if await self.clock.sleep(session.idle_delay(), self.cancel_token):
                return

    def list_groups(self, prefix: Optional[str] = None) -> AsyncIterator[str]:
        return self.lister.list_groups(prefix)

    def list_streams(
        self, group: str, prefix: Optional[str] = None
    ) -> AsyncIterator[str]:
        return self.lister.list_streams(group, prefix)
