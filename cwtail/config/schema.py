"""Pydantic schema for configuration validation."""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    Operations,
    RateLimits,
    RetryDefaults,
    TailDefaults,
)


class AwsConfig(BaseModel):
    """Schema for CloudWatch client settings."""

    region: Optional[str] = Field(default=None, description="AWS region")
    endpoint_url: Optional[str] = Field(
        default=None, description="Custom endpoint, e.g. a local emulator"
    )


class TailConfig(BaseModel):
    """Schema for the tailing engine."""

    poll_interval: float = Field(
        default=TailDefaults.POLL_INTERVAL,
        gt=0,
        le=60,
        description="Seconds between follow-mode poll cycles",
    )
    refresh_every_cycles: int = Field(
        default=TailDefaults.REFRESH_EVERY_CYCLES,
        ge=1,
        description="Re-resolve the stream set every N follow cycles",
    )
    page_budget_per_cycle: int = Field(
        default=TailDefaults.PAGE_BUDGET_PER_CYCLE,
        ge=1,
        description="Pages a single stream may fetch in one cycle",
    )
    page_size: Optional[int] = Field(
        default=None, gt=0, le=10000, description="Events per page (backend max)"
    )
    default_start_offset_seconds: int = Field(
        default=TailDefaults.DEFAULT_START_OFFSET,
        ge=0,
        description="Start this many seconds ago when no start is given",
    )
    cancel_grace_period: float = Field(
        default=TailDefaults.CANCEL_GRACE_PERIOD,
        ge=0,
        description="Seconds in-flight fetches may finish after cancellation",
    )
    filter_mode: Literal["substring", "regex", "backend"] = Field(
        default="substring", description="How the --grep pattern is matched"
    )


class RetryConfig(BaseModel):
    """Schema for backoff and retries."""

    max_attempts: int = Field(default=RetryDefaults.MAX_ATTEMPTS, ge=1, le=50)
    base_delay: float = Field(default=RetryDefaults.BASE_DELAY, gt=0)
    max_delay: float = Field(default=RetryDefaults.MAX_DELAY, gt=0)
    throttle_max_delay: float = Field(default=RetryDefaults.THROTTLE_MAX_DELAY, gt=0)
    jitter: bool = Field(default=True)


class RateLimitingConfig(BaseModel):
    """Schema for request pacing."""

    enabled: bool = Field(default=True)
    safety_margin: float = Field(default=RateLimits.SAFETY_MARGIN, gt=0, le=1)
    requests_per_second: Dict[str, float] = Field(
        default_factory=lambda: {
            Operations.FILTER_LOG_EVENTS: RateLimits.FILTER_LOG_EVENTS,
            Operations.DESCRIBE_LOG_STREAMS: RateLimits.DESCRIBE_LOG_STREAMS,
            Operations.DESCRIBE_LOG_GROUPS: RateLimits.DESCRIBE_LOG_GROUPS,
        }
    )

    @field_validator("requests_per_second")
    @classmethod
    def validate_limits(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Every quota must be positive."""
        for operation, limit in v.items():
            if limit <= 0:
                raise ValueError(
                    f"requests_per_second for {operation} must be positive, got {limit}"
                )
        return v


class DisplayConfig(BaseModel):
    """Schema for output annotations."""

    timestamp: bool = Field(default=False, description="Print event timestamps")
    event_id: bool = Field(default=False, description="Print event ids")
    stream_name: bool = Field(default=False, description="Print stream names")
    color: bool = Field(default=True, description="Colorize annotations")


class UpdateCheckConfig(BaseModel):
    """Schema for the new-version notice."""

    enabled: bool = Field(default=True)
    url: str = Field(default="https://pypi.org/pypi/cwtail/json")
    timeout: float = Field(default=2.0, gt=0)


class LoggingConfig(BaseModel):
    """Schema for diagnostics logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")
    file: Optional[str] = Field(default=None)


class CwTailConfig(BaseModel):
    """Root schema for cwtail configuration."""

    aws: AwsConfig = Field(default_factory=AwsConfig)
    tail: TailConfig = Field(default_factory=TailConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    rate_limiting: RateLimitingConfig = Field(default_factory=RateLimitingConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    update_check: UpdateCheckConfig = Field(default_factory=UpdateCheckConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
