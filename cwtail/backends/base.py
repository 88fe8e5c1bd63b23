"""Base backend interface for log stores."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.types import EventPage, ListPage


class LogBackend(ABC):
    """Abstract base class for paginated log stores.

    A backend organizes events into named groups of named streams and
    exposes three point queries. Each call is one bounded request; callers
    drive pagination by passing back the opaque ``next_token`` of the
    previous page.

    Implementations raise the backend errors from ``cwtail.core.exceptions``:
    ``ThrottledError`` for rate limiting, ``BackendUnavailableError`` for
    transient failures, and ``GroupNotFoundError`` / ``StreamNotFoundError``
    for missing resources.
    """

    @abstractmethod
    async def describe_groups(
        self,
        prefix: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListPage:
        """List one page of group names."""

    @abstractmethod
    async def describe_streams(
        self,
        group: str,
        prefix: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListPage:
        """List one page of stream names in a group."""

    @abstractmethod
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
        """Fetch one page of events, ordered by timestamp.

        Args:
            group: Group name
            stream_names: Restrict to these streams (None for the whole group)
            start_ms: Inclusive lower bound in epoch milliseconds
            end_ms: Exclusive upper bound in epoch milliseconds
            filter_pattern: Backend-native filter pattern
            next_token: Continuation token from the previous page
            limit: Maximum events in the page
        """

    async def close(self) -> None:
        """Release client resources. The default implementation does nothing."""
