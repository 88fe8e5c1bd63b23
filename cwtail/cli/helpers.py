"""Shared helper functions for CLI commands."""

import asyncio
from typing import AsyncIterator, List, Optional

import rich_click as click

from ..backends import CloudWatchBackend, LogBackend
from ..config import Config
from ..core.clock import CancellationToken, Clock
from ..core.merge_scheduler import MergeScheduler, WarningCallback
from ..core.rate_limiter import RequestRateLimiter
from ..core.settings import TailSettings
from .error_handler import ConfigError


def aws_options(func):
    """Options shared by every command talking to the backend."""
    func = click.option(
        "--endpoint-url", help="Custom endpoint, e.g. a local emulator"
    )(func)
    func = click.option("--region", help="AWS region (defaults to config/boto3)")(func)
    return func


def load_config() -> Config:
    """Load the user configuration, reporting problems as a ConfigError."""
    try:
        return Config()
    except (ValueError, OSError) as e:
        raise ConfigError(
            str(e), "Fix the file or recreate it with 'cwtail config --force'"
        ) from e


def build_backend(
    config: Config,
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> LogBackend:
    """Create the CloudWatch backend, command line flags winning over config."""
    return CloudWatchBackend(
        region=region or config.get("aws.region"),
        endpoint_url=endpoint_url or config.get("aws.endpoint_url"),
    )


def build_scheduler(
    config: Config,
    backend: LogBackend,
    cancel_token: Optional[CancellationToken] = None,
    on_warning: Optional[WarningCallback] = None,
    clock: Optional[Clock] = None,
) -> MergeScheduler:
    clock = clock or Clock()
    return MergeScheduler(
        backend,
        rate_limiter=RequestRateLimiter(config, clock),
        settings=TailSettings.from_config(config),
        clock=clock,
        cancel_token=cancel_token,
        on_warning=on_warning,
    )


async def iter_names(
    config: Config,
    group: Optional[str] = None,
    prefix: Optional[str] = None,
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> AsyncIterator[str]:
    """Yield group names, or the group's stream names when a group is given."""
    backend = build_backend(config, region, endpoint_url)
    try:
        scheduler = build_scheduler(config, backend)
        if group is None:
            names = scheduler.list_groups(prefix)
        else:
            names = scheduler.list_streams(group, prefix)
        async for name in names:
            yield name
    finally:
        await backend.close()


def list_names(
    config: Config, group: Optional[str] = None, prefix: Optional[str] = None
) -> List[str]:
    """Blocking variant of iter_names, used by shell completion."""

    async def _collect() -> List[str]:
        return [name async for name in iter_names(config, group, prefix)]

    return asyncio.run(_collect())
