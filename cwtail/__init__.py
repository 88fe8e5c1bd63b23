"""cwtail - follow and merge CloudWatch-style log streams"""

__version__ = "0.1.0"

# Backend exports
from .backends import CloudWatchBackend, InMemoryBackend, LogBackend

# Config exports
from .config import Config

# Core exports
from .core import (
    LogEvent,
    MergeScheduler,
    TextFilter,
    TimeWindow,
)

# IO exports
from .io import get_logger

__all__ = [
    # Version
    "__version__",
    # Core
    "MergeScheduler",
    "TimeWindow",
    "TextFilter",
    "LogEvent",
    # Backends
    "LogBackend",
    "CloudWatchBackend",
    "InMemoryBackend",
    # Config
    "Config",
    # IO
    "get_logger",
]
