"""Constants shared across cwtail."""


# Nord color scheme for console output
class Colors:
    """Nord color scheme constants."""

    GREEN = "#a3be8c"
    RED = "#bf616a"
    YELLOW = "#ebcb8b"
    BLUE = "#5e81ac"
    DIM = "#4c566a"


class StreamPatterns:
    """Stream pattern syntax."""

    WILDCARD = "*"
    GLOB_CHARS = "*?["


class Operations:
    """Backend API operations, each paced against its own quota."""

    FILTER_LOG_EVENTS = "filter_log_events"
    DESCRIBE_LOG_STREAMS = "describe_log_streams"
    DESCRIBE_LOG_GROUPS = "describe_log_groups"


class FilterModes:
    """Text filter interpretations."""

    SUBSTRING = "substring"
    REGEX = "regex"
    BACKEND = "backend"


# Tailing defaults
class TailDefaults:
    """Defaults for the tailing engine."""

    POLL_INTERVAL = 1.0  # Seconds between follow-mode cycles
    REFRESH_EVERY_CYCLES = 10  # Re-resolve streams every N follow cycles
    PAGE_BUDGET_PER_CYCLE = 5  # Pages one stream may fetch per cycle
    DEFAULT_START_OFFSET = 30  # Seconds before now when no start is given
    CANCEL_GRACE_PERIOD = 2.0  # Seconds in-flight fetches get after cancel


class RetryDefaults:
    """Defaults for backoff and retries."""

    MAX_ATTEMPTS = 5  # Attempts per cycle for unavailable errors
    BASE_DELAY = 0.5
    MAX_DELAY = 30.0
    THROTTLE_MAX_DELAY = 60.0


class RateLimits:
    """CloudWatch Logs per-account request quotas (requests per second)."""

    FILTER_LOG_EVENTS = 25
    DESCRIBE_LOG_STREAMS = 25
    DESCRIBE_LOG_GROUPS = 10
    SAFETY_MARGIN = 0.9  # Use 90% of the quota to be safe
    MAX_REQUEST_HISTORY = 1000
