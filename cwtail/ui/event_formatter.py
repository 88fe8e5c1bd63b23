"""Formatting of tailed events for the terminal."""

from rich.text import Text

from ..constants import Colors
from ..core.types import LogEvent

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
SEPARATOR = " - "


class EventFormatter:
    """Renders a LogEvent as ``[timestamp - ][stream - ][event id - ]message``."""

    def __init__(
        self,
        timestamp: bool = False,
        event_id: bool = False,
        stream_name: bool = False,
        color: bool = True,
    ):
        self.timestamp = timestamp
        self.event_id = event_id
        self.stream_name = stream_name
        self.color = color

    @staticmethod
    def format_timestamp(event: LogEvent) -> str:
        return event.time.strftime(TIMESTAMP_FORMAT)

    def _style(self, color: str) -> str:
        return color if self.color else ""

    def format(self, event: LogEvent) -> Text:
        """Build the styled line for one event."""
        line = Text()
        if self.timestamp:
            line.append(self.format_timestamp(event), style=self._style(Colors.GREEN))
            line.append(SEPARATOR)
        if self.stream_name:
            line.append(event.stream_id, style=self._style(Colors.BLUE))
            line.append(SEPARATOR)
        if self.event_id:
            line.append(event.event_id, style=self._style(Colors.YELLOW))
            line.append(SEPARATOR)
        line.append(event.message)
        return line
