"""Enumeration of groups and streams for the ls commands."""

from typing import TYPE_CHECKING, AsyncIterator, Optional, Set

from ..backends.retry_utils import retry_with_exponential_backoff
from ..constants import Operations
from .exceptions import BackendUnavailableError, ThrottledError
from .rate_limiter import RequestRateLimiter
from .settings import TailSettings
from .stream_enumerator import StreamEnumerator
from .types import ListPage

if TYPE_CHECKING:
    from ..backends.base import LogBackend


class Lister:
    """Paginated listing of group and stream names.

    Each page is retried with backoff on throttling or transient failures.
    Sequences are finite and yielded lazily; a name repeated across pages
    is yielded once.
    """

    def __init__(
        self,
        backend: "LogBackend",
        enumerator: Optional[StreamEnumerator] = None,
        rate_limiter: Optional[RequestRateLimiter] = None,
        settings: Optional[TailSettings] = None,
    ):
        self.backend = backend
        self.rate_limiter = rate_limiter
        self.enumerator = enumerator or StreamEnumerator(backend, rate_limiter)
        self.settings = settings or TailSettings()

    async def _with_retries(self, func, *args) -> ListPage:
        return await retry_with_exponential_backoff(
            func,
            *args,
            max_retries=self.settings.max_attempts,
            base_delay=self.settings.base_delay,
            max_delay=self.settings.max_delay,
            jitter=self.settings.jitter,
            retry_on=(ThrottledError, BackendUnavailableError),
        )

    async def _groups_page(
        self, prefix: Optional[str], next_token: Optional[str]
    ) -> ListPage:
        if self.rate_limiter:
            await self.rate_limiter.acquire(Operations.DESCRIBE_LOG_GROUPS)
        return await self.backend.describe_groups(prefix=prefix, next_token=next_token)

    async def list_groups(self, prefix: Optional[str] = None) -> AsyncIterator[str]:
        """Yield every group name."""
        seen: Set[str] = set()
        next_token = None
        while True:
            page = await self._with_retries(self._groups_page, prefix, next_token)
            for name in page.names:
                if name not in seen:
                    seen.add(name)
                    yield name
            if not page.next_token or page.next_token == next_token:
                break
            next_token = page.next_token

    async def list_streams(
        self, group: str, prefix: Optional[str] = None
    ) -> AsyncIterator[str]:
        """Yield every stream name in a group."""
        seen: Set[str] = set()
        next_token = None
        while True:
            page = await self._with_retries(
                self.enumerator.fetch_stream_page, group, prefix, next_token
            )
            for name in page.names:
                if name not in seen:
                    seen.add(name)
                    yield name
            if not page.next_token or page.next_token == next_token:
                break
            next_token = page.next_token
