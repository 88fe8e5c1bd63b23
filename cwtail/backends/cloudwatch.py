"""AWS CloudWatch Logs backend."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig

from ..constants import Operations
from ..core.types import EventPage, ListPage, LogEvent
from ..io.logger import get_logger
from .base import LogBackend
from .error_utils import classify_error

logger = get_logger("backends.cloudwatch")

# Server-side caps for a single call
MAX_FILTER_LIMIT = 10000
MAX_DESCRIBE_LIMIT = 50


class CloudWatchBackend(LogBackend):
    """CloudWatch Logs through a boto3 ``logs`` client.

    boto3 is synchronous, so every call runs on a small thread pool and
    stream workers can overlap their requests without blocking the loop.
    Retries are left to the tailing engine; botocore's own retry mode is
    reduced to a single attempt so throttling surfaces immediately.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        max_workers: int = 8,
        client: Any = None,
    ):
        """Initialize the backend.

        Args:
            region: AWS region (None lets boto3 resolve it)
            endpoint_url: Custom endpoint, e.g. a local emulator
            max_workers: Threads available for concurrent calls
            client: Pre-built logs client (mainly for tests)
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self.executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cwtail-cw"
        )
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "logs",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                config=BotoConfig(retries={"max_attempts": 1, "mode": "standard"}),
            )
        return self._client

    async def _call(
        self,
        operation: str,
        group: Optional[str] = None,
        stream: Optional[str] = None,
        **params: Any,
    ) -> Dict[str, Any]:
        """Run one client call on the executor, translating its errors."""
        loop = asyncio.get_running_loop()
        try:
            method = getattr(self.client, operation)
            return await loop.run_in_executor(self.executor, partial(method, **params))
        except Exception as e:
            raise classify_error(e, operation, group=group, stream=stream) from e

    async def describe_groups(
        self,
        prefix: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListPage:
        params: Dict[str, Any] = {}
        if prefix:
            params["logGroupNamePrefix"] = prefix
        if next_token:
            params["nextToken"] = next_token
        if limit:
            params["limit"] = min(limit, MAX_DESCRIBE_LIMIT)

        response = await self._call(Operations.DESCRIBE_LOG_GROUPS, **params)
        names = [group["logGroupName"] for group in response.get("logGroups", [])]
        return ListPage(names=names, next_token=response.get("nextToken"))

    async def describe_streams(
        self,
        group: str,
        prefix: Optional[str] = None,
        next_token: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ListPage:
        params: Dict[str, Any] = {"logGroupName": group}
        if prefix:
            params["logStreamNamePrefix"] = prefix
        if next_token:
            params["nextToken"] = next_token
        if limit:
            params["limit"] = min(limit, MAX_DESCRIBE_LIMIT)

        response = await self._call(
            Operations.DESCRIBE_LOG_STREAMS, group=group, **params
        )
        names = [stream["logStreamName"] for stream in response.get("logStreams", [])]
        return ListPage(names=names, next_token=response.get("nextToken"))

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
        params: Dict[str, Any] = {"logGroupName": group}
        if stream_names:
            params["logStreamNames"] = stream_names
        if start_ms is not None:
            params["startTime"] = start_ms
        if end_ms is not None:
            # CloudWatch treats endTime as inclusive
            params["endTime"] = end_ms - 1
        if filter_pattern:
            params["filterPattern"] = filter_pattern
        if next_token:
            params["nextToken"] = next_token
        if limit:
            params["limit"] = min(limit, MAX_FILTER_LIMIT)

        stream = stream_names[0] if stream_names and len(stream_names) == 1 else None
        response = await self._call(
            Operations.FILTER_LOG_EVENTS, group=group, stream=stream, **params
        )

        events = [
            LogEvent(
                event_id=raw["eventId"],
                timestamp=raw["timestamp"],
                message=raw.get("message", ""),
                stream_id=raw.get("logStreamName", stream or ""),
                group_id=group,
            )
            for raw in response.get("events", [])
        ]
        return EventPage(events=events, next_token=response.get("nextToken"))

    async def close(self) -> None:
        self.executor.shutdown(wait=False)
        logger.debug("CloudWatch backend closed")
