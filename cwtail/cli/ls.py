"""List log groups and streams."""

import asyncio
from typing import Optional

import rich_click as click
from rich.console import Console

from ..config import Config
from .completion import complete_groups
from .error_handler import CLIErrorHandler
from .helpers import aws_options, iter_names, load_config

console = Console(highlight=False)


async def _print_names(
    config: Config,
    group: Optional[str],
    prefix: Optional[str],
    region: Optional[str],
    endpoint_url: Optional[str],
) -> None:
    async for name in iter_names(config, group, prefix, region, endpoint_url):
        console.print(name, markup=False, soft_wrap=True)


@click.group()
def ls():
    """Show an entity: groups, or the streams of a group."""


@ls.command()
@click.option("--prefix", help="Only groups whose name starts with this")
@aws_options
@click.pass_context
def groups(
    ctx, prefix: Optional[str], region: Optional[str], endpoint_url: Optional[str]
):
    """Show all groups."""
    handler = CLIErrorHandler()
    try:
        config = (ctx.obj or {}).get("config") or load_config()
        asyncio.run(_print_names(config, None, prefix, region, endpoint_url))
    except (Exception, KeyboardInterrupt) as e:
        handler.handle_error(e)


@ls.command()
@click.argument("group", shell_complete=complete_groups)
@click.option("--prefix", help="Only streams whose name starts with this")
@aws_options
@click.pass_context
def streams(
    ctx,
    group: str,
    prefix: Optional[str],
    region: Optional[str],
    endpoint_url: Optional[str],
):
    """Show all streams in a given log group."""
    handler = CLIErrorHandler()
    try:
        config = (ctx.obj or {}).get("config") or load_config()
        asyncio.run(_print_names(config, group, prefix, region, endpoint_url))
    except (Exception, KeyboardInterrupt) as e:
        handler.handle_error(e)
