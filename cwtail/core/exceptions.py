"""Custom exceptions for cwtail core functionality."""

from typing import Optional


class CwTailError(Exception):
    """Base exception for all cwtail errors."""


class InvalidRangeError(CwTailError):
    """Raised when a time window's start is not strictly before its end."""

    def __init__(self, start_ms: int, end_ms: int, message: Optional[str] = None):
        self.start_ms = start_ms
        self.end_ms = end_ms
        if message is None:
            message = (
                f"Invalid time range: start ({start_ms}) must be before end ({end_ms})"
            )
        super().__init__(message)


class InvalidFilterError(CwTailError):
    """Raised when a text filter pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid filter pattern '{pattern}': {reason}")


class BackendError(CwTailError):
    """Base exception for errors reported by the log backend."""


class BackendUnavailableError(BackendError):
    """Raised on transient transport or service failures."""


class ThrottledError(BackendError):
    """Raised when the backend rejects a request because of rate limits."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        if message is None:
            message = f"Request rate exceeded for {operation}"
        super().__init__(message)


class GroupNotFoundError(BackendError):
    """Raised when a log group does not exist."""

    def __init__(self, group: str):
        self.group = group
        super().__init__(f"Log group not found: {group}")


class StreamNotFoundError(BackendError):
    """Raised when a log stream does not exist in its group."""

    def __init__(self, group: str, stream: str):
        self.group = group
        self.stream = stream
        super().__init__(f"Log stream not found: {group}/{stream}")


class NoMatchingStreamsError(CwTailError):
    """Raised when a stream pattern resolves to no streams at session start."""

    def __init__(self, group: str, pattern: str):
        self.group = group
        self.pattern = pattern
        super().__init__(f"No streams in {group} match '{pattern}'")
