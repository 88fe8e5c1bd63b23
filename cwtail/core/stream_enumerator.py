"""Resolution of stream patterns against a group's live stream listing."""

import fnmatch
from typing import TYPE_CHECKING, AsyncIterator, Optional, Set

from ..constants import Operations, StreamPatterns
from ..io.logger import get_logger
from .exceptions import StreamNotFoundError
from .rate_limiter import RequestRateLimiter
from .types import ListPage

if TYPE_CHECKING:
    from ..backends.base import LogBackend

logger = get_logger("stream_enumerator")


def split_pattern(pattern: Optional[str]) -> tuple[str, Optional[str]]:
    """Classify a stream pattern.

    Returns:
        (kind, prefix) where kind is "all", "prefix", "glob" or "exact" and
        prefix is the literal leading part usable as a server-side filter
    """
    if not pattern or pattern == StreamPatterns.WILDCARD:
        return "all", None

    first_glob = min(
        (pattern.index(c) for c in StreamPatterns.GLOB_CHARS if c in pattern),
        default=-1,
    )
    if first_glob == -1:
        return "exact", pattern
    if first_glob == len(pattern) - 1 and pattern.endswith(StreamPatterns.WILDCARD):
        return "prefix", pattern[:-1] or None
    return "glob", pattern[:first_glob] or None


class StreamEnumerator:
    """Turns a stream pattern into the concrete set of streams to poll.

    Patterns:
        ``*`` or empty: every stream in the group
        ``name*``: streams starting with ``name``
        ``app-?-[ab]*``: shell-style glob, matched client-side
        anything else: exactly that stream
    """

    def __init__(
        self,
        backend: "LogBackend",
        rate_limiter: Optional[RequestRateLimiter] = None,
        list_page_size: Optional[int] = None,
    ):
        self.backend = backend
        self.rate_limiter = rate_limiter
        self.list_page_size = list_page_size

    async def fetch_stream_page(
        self, group: str, prefix: Optional[str] = None, next_token: Optional[str] = None
    ) -> ListPage:
        """One paced call to the stream listing endpoint."""
        if self.rate_limiter:
            await self.rate_limiter.acquire(Operations.DESCRIBE_LOG_STREAMS)
        return await self.backend.describe_streams(
            group, prefix=prefix, next_token=next_token, limit=self.list_page_size
        )

    async def iter_stream_names(
        self, group: str, prefix: Optional[str] = None
    ) -> AsyncIterator[str]:
        """Yield every stream name in a group, paginating until exhausted.

        Names repeated across pages are yielded once.
        """
        seen: Set[str] = set()
        next_token = None
        while True:
            page = await self.fetch_stream_page(group, prefix, next_token)
            for name in page.names:
                if name not in seen:
                    seen.add(name)
                    yield name
            if not page.next_token or page.next_token == next_token:
                break
            next_token = page.next_token

    async def resolve(self, group: str, pattern: Optional[str]) -> Set[str]:
        """Resolve a pattern to the set of matching stream names.

        Raises:
            StreamNotFoundError: If an exact stream name does not exist
            GroupNotFoundError: If the group does not exist
            BackendUnavailableError, ThrottledError: On transport problems
        """
        kind, prefix = split_pattern(pattern)

        names: Set[str] = set()
        async for name in self.iter_stream_names(group, prefix):
            if kind == "exact" and name != pattern:
                continue
            if kind == "glob" and not fnmatch.fnmatchcase(name, pattern):
                continue
            names.add(name)

        if kind == "exact" and not names:
            raise StreamNotFoundError(group, pattern)

        logger.debug(f"Resolved {group}/{pattern or '*'} to {len(names)} streams")
        return names
