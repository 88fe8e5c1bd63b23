"""Parsing of command line time expressions into UTC instants."""

import re
from datetime import datetime, timezone
from typing import Callable, Optional

import click

# Full dates, most specific last
DATE_FORMATS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}$"), "%Y-%m-%dT%H"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$"), "%Y-%m-%dT%H:%M"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$"), "%Y-%m-%dT%H:%M:%S"),
]

# Clock times, expanded to today
HOUR = re.compile(r"^(\d{1,2})$")
HOUR_MINUTE = re.compile(r"^(\d{1,2}):(\d{2})$")

ACCEPTED = "YYYY-MM-DD[THH[:MM[:SS]]], HH or HH:MM"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_utc_time(value: str, now: Optional[datetime] = None) -> datetime:
    """Parse a time expression as a UTC instant.

    Args:
        value: Expression such as ``2017-02-27``, ``2017-02-27T09:00`` or ``9:30``
        now: Reference instant for clock-only expressions

    Returns:
        An aware UTC datetime

    Raises:
        ValueError: If the expression is not recognised or not a real time
    """
    value = value.strip()

    for pattern, fmt in DATE_FORMATS:
        if pattern.match(value):
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)

    now = now or _utcnow()
    hour, minute = None, 0
    match = HOUR.match(value)
    if match:
        hour = int(match.group(1))
    else:
        match = HOUR_MINUTE.match(value)
        if match:
            hour, minute = int(match.group(1)), int(match.group(2))

    if hour is None:
        raise ValueError(f"'{value}' is not a recognised time (expected {ACCEPTED})")

    return datetime(now.year, now.month, now.day, hour, minute, tzinfo=timezone.utc)


class UTCTime(click.ParamType):
    """Click parameter type for UTC time expressions."""

    name = "time"

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self.now = now or _utcnow

    def convert(self, value, param, ctx):
        if isinstance(value, datetime):
            return value
        try:
            return parse_utc_time(value, self.now())
        except ValueError as e:
            self.fail(str(e), param, ctx)
