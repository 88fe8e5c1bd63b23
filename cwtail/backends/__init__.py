"""Log backend adapters."""

from .base import LogBackend
from .cloudwatch import CloudWatchBackend
from .memory import InMemoryBackend

__all__ = [
    "LogBackend",
    "CloudWatchBackend",
    "InMemoryBackend",
]
