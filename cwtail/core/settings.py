"""Tuning knobs for the tailing engine."""

from dataclasses import dataclass
from typing import Optional

from ..config.config import Config
from ..constants import RetryDefaults, TailDefaults


@dataclass
class TailSettings:
    """Engine settings resolved from configuration."""

    poll_interval: float = TailDefaults.POLL_INTERVAL
    refresh_every_cycles: int = TailDefaults.REFRESH_EVERY_CYCLES
    page_budget_per_cycle: int = TailDefaults.PAGE_BUDGET_PER_CYCLE
    page_size: Optional[int] = None
    cancel_grace_period: float = TailDefaults.CANCEL_GRACE_PERIOD
    max_attempts: int = RetryDefaults.MAX_ATTEMPTS
    base_delay: float = RetryDefaults.BASE_DELAY
    max_delay: float = RetryDefaults.MAX_DELAY
    throttle_max_delay: float = RetryDefaults.THROTTLE_MAX_DELAY
    jitter: bool = True

    @classmethod
    def from_config(cls, config: Config) -> "TailSettings":
        return cls(
            poll_interval=config.get("tail.poll_interval", TailDefaults.POLL_INTERVAL),
            refresh_every_cycles=config.get(
                "tail.refresh_every_cycles", TailDefaults.REFRESH_EVERY_CYCLES
            ),
            page_budget_per_cycle=config.get(
                "tail.page_budget_per_cycle", TailDefaults.PAGE_BUDGET_PER_CYCLE
            ),
            page_size=config.get("tail.page_size"),
            cancel_grace_period=config.get(
                "tail.cancel_grace_period", TailDefaults.CANCEL_GRACE_PERIOD
            ),
            max_attempts=config.get("retry.max_attempts", RetryDefaults.MAX_ATTEMPTS),
            base_delay=config.get("retry.base_delay", RetryDefaults.BASE_DELAY),
            max_delay=config.get("retry.max_delay", RetryDefaults.MAX_DELAY),
            throttle_max_delay=config.get(
                "retry.throttle_max_delay", RetryDefaults.THROTTLE_MAX_DELAY
            ),
            jitter=config.get("retry.jitter", True),
        )
