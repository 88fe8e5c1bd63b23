"""User interface and display components for cwtail."""

from .display_utils import DisplayUtils
from .event_formatter import EventFormatter

__all__ = [
    "DisplayUtils",
    "EventFormatter",
]
