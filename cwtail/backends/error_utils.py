"""Translate CloudWatch client errors into cwtail's error taxonomy."""

from typing import Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ReadTimeoutError,
)

from ..core.exceptions import (
    BackendError,
    BackendUnavailableError,
    GroupNotFoundError,
    StreamNotFoundError,
    ThrottledError,
)
from .retry_utils import is_retryable_error, is_throttling_error

THROTTLING_CODES = {
    "ThrottlingException",
    "Throttling",
    "TooManyRequestsException",
    "RequestLimitExceeded",
    "LimitExceededException",
}

UNAVAILABLE_CODES = {
    "ServiceUnavailableException",
    "ServiceUnavailable",
    "InternalFailure",
    "InternalServerError",
    "RequestTimeout",
    "RequestTimeoutException",
}

NOT_FOUND_CODES = {"ResourceNotFoundException"}


def classify_error(
    error: Exception,
    operation: str,
    group: Optional[str] = None,
    stream: Optional[str] = None,
) -> BackendError:
    """Map a boto3/botocore exception to a backend error.

    Args:
        error: The exception raised by the client
        operation: API operation that failed
        group: Group involved in the call, for not-found errors
        stream: Stream involved in the call, for not-found errors

    Returns:
        The matching BackendError subclass instance
    """
    if isinstance(error, BackendError):
        return error

    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "")
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)

        if code in THROTTLING_CODES or status == 429:
            return ThrottledError(operation, str(error))
        if code in NOT_FOUND_CODES:
            if stream is not None:
                return StreamNotFoundError(group or "", stream)
            return GroupNotFoundError(group or "")
        if code in UNAVAILABLE_CODES or status >= 500:
            return BackendUnavailableError(str(error))

    if isinstance(error, (NoCredentialsError, PartialCredentialsError, NoRegionError)):
        # Setup problems, retrying cannot help
        return BackendError(f"{operation} failed: {error}")

    if isinstance(
        error,
        (
            EndpointConnectionError,
            ConnectTimeoutError,
            ReadTimeoutError,
            ConnectionClosedError,
        ),
    ):
        return BackendUnavailableError(str(error))

    if is_throttling_error(error):
        return ThrottledError(operation, str(error))
    if isinstance(error, (BotoCoreError, OSError)) or is_retryable_error(error):
        return BackendUnavailableError(str(error))

    return BackendError(f"{operation} failed: {error}")
