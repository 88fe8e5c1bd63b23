"""Tail one or more streams of a log group."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import rich_click as click
from rich.console import Console

from ..config import Config
from ..constants import FilterModes, TailDefaults
from ..core.clock import CancellationToken
from ..core.filters import TextFilter
from ..core.interrupt_handler import InterruptHandler
from ..core.time_window import TimeWindow
from ..io.logger import setup_logging
from ..ui.display_utils import DisplayUtils
from ..ui.event_formatter import EventFormatter
from .completion import complete_groups, complete_streams
from .constants import DEFAULT_STREAM
from .error_handler import CLIErrorHandler
from .helpers import aws_options, build_backend, build_scheduler, load_config
from .time_parser import UTCTime

console = Console(highlight=False)
display = DisplayUtils()


async def _run_tail(
    config: Config,
    group: str,
    stream: str,
    window: TimeWindow,
    follow: bool,
    text_filter: TextFilter,
    formatter: EventFormatter,
    region: Optional[str],
    endpoint_url: Optional[str],
) -> None:
    token = CancellationToken()
    token.bind_loop(asyncio.get_running_loop())

    backend = build_backend(config, region, endpoint_url)
    scheduler = build_scheduler(
        config, backend, cancel_token=token, on_warning=display.tail_warning
    )
    try:
        with InterruptHandler(token, display.console):
            async for event in scheduler.tail(
                group, stream, window, follow=follow, text_filter=text_filter
            ):
                console.print(formatter.format(event), soft_wrap=True)
    finally:
        await backend.close()


@click.command()
@click.argument("group", shell_complete=complete_groups)
@click.argument(
    "stream", required=False, default=DEFAULT_STREAM, shell_complete=complete_streams
)
@click.argument("start", required=False, type=UTCTime())
@click.argument("end", required=False, type=UTCTime())
@click.option(
    "--follow",
    "-f",
    is_flag=True,
    help="Don't stop at the end of the streams; wait for new events",
)
@click.option("--timestamp", "-t", is_flag=True, help="Print the event timestamp")
@click.option("--event-id", "-i", is_flag=True, help="Print the event id")
@click.option(
    "--stream-name", "-s", is_flag=True, help="Print the stream each event belongs to"
)
@click.option("--grep", "-g", default=None, help="Only show events matching this")
@click.option(
    "--filter-mode",
    type=click.Choice([FilterModes.SUBSTRING, FilterModes.REGEX, FilterModes.BACKEND]),
    default=None,
    help="How --grep is interpreted (default from config: substring)",
)
@click.option("--no-color", is_flag=True, help="Disable colored annotations")
@aws_options
@click.option("--verbose", "-v", is_flag=True, help="Log engine activity to stderr")
@click.pass_context
def tail(
    ctx,
    group: str,
    stream: str,
    start: Optional[datetime],
    end: Optional[datetime],
    follow: bool,
    timestamp: bool,
    event_id: bool,
    stream_name: bool,
    grep: Optional[str],
    filter_mode: Optional[str],
    no_color: bool,
    region: Optional[str],
    endpoint_url: Optional[str],
    verbose: bool,
):
    """Tail a log group.

    STREAM is a stream name, a prefix ending in '*', a glob, or '*' for all
    streams. START and END are UTC times: 2017-02-27[T09[:00[:00]]], or HH
    and HH:MM for today. START defaults to 30 seconds ago.

    [bold]EXAMPLES:[/bold]

    [#4c566a]Follow a whole group:[/#4c566a]
        cwtail tail -f /app/web

    [#4c566a]Morning errors of the api streams, with stream names:[/#4c566a]
        cwtail tail -s -g ERROR /app/web 'api-*' 06:00 12:00
    """
    handler = CLIErrorHandler(debug=verbose)
    try:
        config = (ctx.obj or {}).get("config") or load_config()
        setup_logging(
            "DEBUG" if verbose else config.get("logging.level", "WARNING"),
            config.get("logging.file"),
        )

        if start is None:
            offset = config.get(
                "tail.default_start_offset_seconds", TailDefaults.DEFAULT_START_OFFSET
            )
            start = datetime.now(timezone.utc) - timedelta(seconds=offset)
        window = TimeWindow(start, end)
        text_filter = TextFilter(
            grep, filter_mode or config.get("tail.filter_mode", FilterModes.SUBSTRING)
        )
        formatter = EventFormatter(
            timestamp=timestamp or config.get("display.timestamp", False),
            event_id=event_id or config.get("display.event_id", False),
            stream_name=stream_name or config.get("display.stream_name", False),
            color=not no_color and config.get("display.color", True),
        )

        asyncio.run(
            _run_tail(
                config,
                group,
                stream,
                window,
                follow,
                text_filter,
                formatter,
                region,
                endpoint_url,
            )
        )
    except (Exception, KeyboardInterrupt) as e:
        handler.handle_error(e)
