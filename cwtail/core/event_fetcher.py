"""Single-page, rate-limited event fetches."""

from typing import TYPE_CHECKING, Optional

from ..constants import Operations
from ..io.logger import get_logger
from .exceptions import ThrottledError
from .rate_limiter import RequestRateLimiter
from .types import FetchResult

if TYPE_CHECKING:
    from ..backends.base import LogBackend

logger = get_logger("event_fetcher")


class EventFetcher:
    """Performs one bounded backend call for a stream (or a whole group)."""

    def __init__(
        self,
        backend: "LogBackend",
        rate_limiter: Optional[RequestRateLimiter] = None,
        page_size: Optional[int] = None,
    ):
        """Initialize the fetcher.

        Args:
            backend: Log backend to query
            rate_limiter: Paces calls against the backend quota
            page_size: Events per page; None uses the backend's own cap
        """
        self.backend = backend
        self.rate_limiter = rate_limiter
        self.page_size = page_size

    async def fetch_page(
        self,
        group: str,
        stream_id: Optional[str],
        next_token: Optional[str],
        start_ms: Optional[int],
        end_ms: Optional[int] = None,
        filter_pattern: Optional[str] = None,
    ) -> FetchResult:
        """Fetch one page of events.

        Args:
            group: Group name
            stream_id: Stream to read, or None for a group-level query
            next_token: Continuation token from the previous page, if any
            start_ms: Inclusive lower bound passed to the backend
            end_ms: Exclusive upper bound passed to the backend
            filter_pattern: Backend-native filter pattern

        Returns:
            The page's events in timestamp order plus continuation state

        Raises:
            ThrottledError: The backend rejected the call for rate reasons
            BackendUnavailableError: Transient transport failure
            StreamNotFoundError: The stream no longer exists
        """
        if self.rate_limiter:
            await self.rate_limiter.acquire(Operations.FILTER_LOG_EVENTS)

        try:
            page = await self.backend.filter_events(
                group,
                stream_names=[stream_id] if stream_id else None,
                start_ms=start_ms,
                end_ms=end_ms,
                filter_pattern=filter_pattern,
                next_token=next_token,
                limit=self.page_size,
            )
        except ThrottledError:
            if self.rate_limiter:
                self.rate_limiter.record_throttle(Operations.FILTER_LOG_EVENTS)
            raise

        events = sorted(page.events, key=lambda e: e.sort_key)
        has_more = page.next_token is not None and page.next_token != next_token
        logger.debug(
            f"Fetched {len(events)} events from {group}/{stream_id or '*'} "
            f"(more={has_more})"
        )
        return FetchResult(
            events=events,
            next_token=page.next_token if has_more else None,
            has_more=has_more,
        )
