"""Text filtering of event messages."""

import re
from typing import Optional, Pattern

from ..constants import FilterModes
from .exceptions import InvalidFilterError


class TextFilter:
    """Predicate over message text.

    Modes:
        substring: case-sensitive literal substring match (default)
        regex: case-sensitive ``re.search``
        backend: pattern is sent to the backend as its own filter pattern;
            every event the backend returns is accepted
    """

    MODES = (FilterModes.SUBSTRING, FilterModes.REGEX, FilterModes.BACKEND)

    def __init__(
        self, pattern: Optional[str] = None, mode: str = FilterModes.SUBSTRING
    ):
        if mode not in self.MODES:
            raise InvalidFilterError(
                pattern or "", f"unknown filter mode '{mode}'"
            )
        self.pattern = pattern or None
        self.mode = mode
        self._regex: Optional[Pattern[str]] = None

        if self.pattern and mode == FilterModes.REGEX:
            try:
                self._regex = re.compile(self.pattern)
            except re.error as e:
                raise InvalidFilterError(self.pattern, str(e)) from e

    @property
    def active(self) -> bool:
        return self.pattern is not None

    @property
    def server_pattern(self) -> Optional[str]:
        """Pattern to pass to the backend, if any."""
        if self.mode == FilterModes.BACKEND:
            return self.pattern
        return None

    def matches(self, message: str) -> bool:
        if self.pattern is None or self.mode == FilterModes.BACKEND:
            return True
        if self._regex is not None:
            return self._regex.search(message) is not None
        return self.pattern in message

    def __repr__(self) -> str:
        return f"TextFilter(pattern={self.pattern!r}, mode={self.mode!r})"
