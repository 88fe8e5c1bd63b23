"""Tests for the CloudWatch Logs backend using a fake logs client."""

from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from cwtail.backends.cloudwatch import MAX_DESCRIBE_LIMIT, CloudWatchBackend
from cwtail.constants import Operations
from cwtail.core.exceptions import (
    BackendUnavailableError,
    GroupNotFoundError,
    StreamNotFoundError,
    ThrottledError,
)
from tests.builders import GROUP, at


def client_error(code, operation, status=400):
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeLogsClient:
    """Records calls and returns canned responses, or raises queued errors."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def _respond(self, operation, params):
        self.calls.append((operation, params))
        if self.error is not None:
            raise self.error
        return self.responses.get(operation, {})

    def describe_log_groups(self, **params):
        return self._respond(Operations.DESCRIBE_LOG_GROUPS, params)

    def describe_log_streams(self, **params):
        return self._respond(Operations.DESCRIBE_LOG_STREAMS, params)

    def filter_log_events(self, **params):
        return self._respond(Operations.FILTER_LOG_EVENTS, params)


@pytest.fixture
def make_cloudwatch():
    backends = []

    def factory(**kwargs):
        backend = CloudWatchBackend(client=FakeLogsClient(**kwargs))
        backends.append(backend)
        return backend

    yield factory
    for backend in backends:
        backend.executor.shutdown(wait=False)


class TestCloudWatchBackend:
    """Test request building and response parsing."""

    @pytest.mark.asyncio
    async def test_filter_events_request(self, make_cloudwatch):
        backend = make_cloudwatch(
            responses={
                Operations.FILTER_LOG_EVENTS: {
                    "events": [
                        {
                            "eventId": "e1",
                            "timestamp": at(1),
                            "message": "hello",
                            "logStreamName": "web-1",
                        }
                    ],
                    "nextToken": "tok-2",
                }
            }
        )

        page = await backend.filter_events(
            GROUP,
            stream_names=["web-1"],
            start_ms=at(0),
            end_ms=at(60),
            filter_pattern="ERROR",
            next_token="tok-1",
            limit=50000,
        )

        operation, params = backend.client.calls[0]
        assert operation == Operations.FILTER_LOG_EVENTS
        assert params == {
            "logGroupName": GROUP,
            "logStreamNames": ["web-1"],
            "startTime": at(0),
            # Exclusive end becomes CloudWatch's inclusive endTime
            "endTime": at(60) - 1,
            "filterPattern": "ERROR",
            "nextToken": "tok-1",
            "limit": 10000,
        }
        assert page.next_token == "tok-2"
        event = page.events[0]
        assert event.event_id == "e1"
        assert event.timestamp == at(1)
        assert event.message == "hello"
        assert (event.stream_id, event.group_id) == ("web-1", GROUP)

    @pytest.mark.asyncio
    async def test_minimal_filter_request(self, make_cloudwatch):
        backend = make_cloudwatch()

        page = await backend.filter_events(GROUP)

        _, params = backend.client.calls[0]
        assert params == {"logGroupName": GROUP}
        assert page.events == []
        assert page.next_token is None

    @pytest.mark.asyncio
    async def test_describe_groups(self, make_cloudwatch):
        backend = make_cloudwatch(
            responses={
                Operations.DESCRIBE_LOG_GROUPS: {
                    "logGroups": [
                        {"logGroupName": "/app/a"},
                        {"logGroupName": "/app/b"},
                    ],
                    "nextToken": "more",
                }
            }
        )

        page = await backend.describe_groups(prefix="/app", limit=500)

        _, params = backend.client.calls[0]
        assert params == {"logGroupNamePrefix": "/app", "limit": MAX_DESCRIBE_LIMIT}
        assert page.names == ["/app/a", "/app/b"]
        assert page.next_token == "more"

    @pytest.mark.asyncio
    async def test_describe_streams(self, make_cloudwatch):
        backend = make_cloudwatch(
            responses={
                Operations.DESCRIBE_LOG_STREAMS: {
                    "logStreams": [{"logStreamName": "web-1"}],
                }
            }
        )

        page = await backend.describe_streams(GROUP, prefix="web-", next_token="t")

        _, params = backend.client.calls[0]
        assert params == {
            "logGroupName": GROUP,
            "logStreamNamePrefix": "web-",
            "nextToken": "t",
        }
        assert page.names == ["web-1"]
        assert page.next_token is None


class TestCloudWatchErrors:
    """Test that client errors surface as backend errors."""

    @pytest.mark.asyncio
    async def test_throttling(self, make_cloudwatch):
        backend = make_cloudwatch(
            error=client_error("ThrottlingException", Operations.FILTER_LOG_EVENTS)
        )

        with pytest.raises(ThrottledError) as exc_info:
            await backend.filter_events(GROUP, ["web-1"])
        assert exc_info.value.operation == Operations.FILTER_LOG_EVENTS

    @pytest.mark.asyncio
    async def test_missing_stream(self, make_cloudwatch):
        backend = make_cloudwatch(
            error=client_error(
                "ResourceNotFoundException", Operations.FILTER_LOG_EVENTS
            )
        )

        with pytest.raises(StreamNotFoundError) as exc_info:
            await backend.filter_events(GROUP, ["web-1"])
        assert exc_info.value.stream == "web-1"

    @pytest.mark.asyncio
    async def test_missing_group(self, make_cloudwatch):
        backend = make_cloudwatch(
            error=client_error(
                "ResourceNotFoundException", Operations.DESCRIBE_LOG_STREAMS
            )
        )

        with pytest.raises(GroupNotFoundError):
            await backend.describe_streams(GROUP)

    @pytest.mark.asyncio
    async def test_service_unavailable(self, make_cloudwatch):
        backend = make_cloudwatch(
            error=client_error(
                "ServiceUnavailableException", Operations.DESCRIBE_LOG_GROUPS, 503
            )
        )

        with pytest.raises(BackendUnavailableError):
            await backend.describe_groups()

    @pytest.mark.asyncio
    async def test_client_creation_failure_is_translated(self):
        backend = CloudWatchBackend(region="eu-west-1")
        with patch(
            "cwtail.backends.cloudwatch.boto3.client",
            side_effect=ConnectionError("no route to host"),
        ):
            with pytest.raises(BackendUnavailableError):
                await backend.describe_groups()
        await backend.close()

    def test_client_built_lazily_with_single_attempt(self):
        backend = CloudWatchBackend(
            region="eu-west-1", endpoint_url="http://localhost:4566"
        )
        with patch("cwtail.backends.cloudwatch.boto3.client") as client:
            assert backend.client is client.return_value
            assert backend.client is client.return_value

        client.assert_called_once()
        args, kwargs = client.call_args
        assert args == ("logs",)
        assert kwargs["region_name"] == "eu-west-1"
        assert kwargs["endpoint_url"] == "http://localhost:4566"
        assert kwargs["config"].retries == {"max_attempts": 1, "mode": "standard"}
        backend.executor.shutdown()
