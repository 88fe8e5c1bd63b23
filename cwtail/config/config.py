"""Configuration management for cwtail."""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..constants import (
    Operations,
    RateLimits,
    RetryDefaults,
    TailDefaults,
)
from ..io.directories import get_config_path
from ..io.logger import get_logger
from .schema import CwTailConfig

logger = get_logger("config")


class Config:
    """Configuration manager for cwtail."""

    DEFAULT_CONFIG = {
        "aws": {
            "region": None,  # Let boto3 resolve it from the environment
            "endpoint_url": None,
        },
        "tail": {
            "poll_interval": TailDefaults.POLL_INTERVAL,
            "refresh_every_cycles": TailDefaults.REFRESH_EVERY_CYCLES,
            "page_budget_per_cycle": TailDefaults.PAGE_BUDGET_PER_CYCLE,
            "page_size": None,  # Backend default
            "default_start_offset_seconds": TailDefaults.DEFAULT_START_OFFSET,
            "cancel_grace_period": TailDefaults.CANCEL_GRACE_PERIOD,
            "filter_mode": "substring",
        },
        "retry": {
            "max_attempts": RetryDefaults.MAX_ATTEMPTS,
            "base_delay": RetryDefaults.BASE_DELAY,
            "max_delay": RetryDefaults.MAX_DELAY,
            "throttle_max_delay": RetryDefaults.THROTTLE_MAX_DELAY,
            "jitter": True,
        },
        "rate_limiting": {
            "enabled": True,
            "safety_margin": RateLimits.SAFETY_MARGIN,
            "requests_per_second": {
                Operations.FILTER_LOG_EVENTS: RateLimits.FILTER_LOG_EVENTS,
                Operations.DESCRIBE_LOG_STREAMS: RateLimits.DESCRIBE_LOG_STREAMS,
                Operations.DESCRIBE_LOG_GROUPS: RateLimits.DESCRIBE_LOG_GROUPS,
            },
        },
        "display": {
            "timestamp": False,
            "event_id": False,
            "stream_name": False,
            "color": True,
        },
        "update_check": {
            "enabled": True,
            "url": "https://pypi.org/pypi/cwtail/json",
            "timeout": 2.0,
        },
        "logging": {
            "level": "WARNING",
            "file": None,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        # Validate default config
        try:
            validated_config = CwTailConfig(**self.DEFAULT_CONFIG)  # type: ignore[arg-type]
            self.config = validated_config.model_dump()
        except ValidationError as e:
            # This should never happen with our defaults
            logger.error("Default configuration is invalid!")
            raise RuntimeError("Invalid default configuration") from e

        self.config_path = config_path

        # Only load from explicit path if provided
        if config_path:
            self.load_from_file(config_path)
        else:
            # Check standard location (but don't prompt)
            config_path = get_config_path()
            if config_path.exists():
                logger.debug(f"Loading config from: {config_path}")
                self.load_from_file(config_path)

    @staticmethod
    def write_example_config(path: Path):
        """Write example configuration file."""
        example_config = """# cwtail configuration file
# Edit this file to customize behavior

aws:
  region: null           # e.g. eu-west-1; null lets boto3 decide
  endpoint_url: null     # e.g. http://localhost:4566 for an emulator

tail:
  poll_interval: 1.0             # Seconds between polls when following
  refresh_every_cycles: 10       # Look for new streams every N polls
  page_budget_per_cycle: 5       # Pages per stream per poll
  default_start_offset_seconds: 30
  filter_mode: substring         # substring, regex, or backend

retry:
  max_attempts: 5        # Attempts before a failing stream is dropped
  base_delay: 0.5
  max_delay: 30.0
  throttle_max_delay: 60.0

rate_limiting:
  enabled: true
  requests_per_second:
    filter_log_events: 25
    describe_log_streams: 25
    describe_log_groups: 10

display:
  timestamp: false
  event_id: false
  stream_name: false

update_check:
  enabled: true

logging:
  level: WARNING
"""
        with open(path, "w") as f:
            f.write(example_config)

    def load_from_file(self, path: Path):
        """Load configuration from YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            user_config = yaml.safe_load(f)

        if user_config:
            merged_config = self._deep_merge(self.config, user_config)

            try:
                validated_config = CwTailConfig(**merged_config)
                self.config = validated_config.model_dump()
                self.config_path = path
            except ValidationError as e:
                logger.error(f"Configuration validation failed: {path}")
                details = "; ".join(
                    f"{' → '.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                )
                raise ValueError(f"Invalid configuration in {path}: {details}") from e

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value using dot notation (e.g., 'tail.poll_interval')."""
        keys = key_path.split(".")
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any):
        """Set config value using dot notation."""
        test_config = copy.deepcopy(self.config)

        keys = key_path.split(".")
        config = test_config

        # Navigate to the parent of the target key
        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

        try:
            validated_config = CwTailConfig(**test_config)
            self.config = validated_config.model_dump()
        except ValidationError as e:
            for err in e.errors():
                err_path = ".".join(str(loc) for loc in err["loc"])
                if err_path == key_path or err_path.startswith(key_path):
                    raise ValueError(
                        f"Invalid value for {key_path}: {err['msg']}"
                    ) from e
            raise ValueError(
                f"Configuration validation failed after setting {key_path}"
            ) from e

    def save(self, path: Optional[Path] = None):
        """Save configuration to file."""
        save_path = path or self.config_path or get_config_path()

        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w") as f:
            yaml.dump(self.config, f, default_flow_style=False)
