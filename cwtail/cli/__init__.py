# cwtail/cli/__init__.py
"""Main CLI entry point."""

# Configure rich-click BEFORE importing
# NOTE: The following imports violate E402 (module level import not at top)
# This is intentional - we MUST configure rich-click settings before importing
# it as click, otherwise the configuration won't take effect.

import rich_click.rich_click as rc

rc.USE_RICH_MARKUP = True
rc.SHOW_ARGUMENTS = True
rc.GROUP_ARGUMENTS_OPTIONS = True
rc.SHOW_METAVARS_COLUMN = False
rc.APPEND_METAVARS_HELP = True
rc.MAX_WIDTH = 100

# Nord color scheme
rc.STYLE_OPTION = "bold #8fbcbb"  # Nord7 teal
rc.STYLE_ARGUMENT = "bold #88c0d0"  # Nord8 light blue
rc.STYLE_COMMAND = "bold #5e81ac"  # Nord10 blue
rc.STYLE_SWITCH = "#a3be8c"  # Nord14 green
rc.STYLE_METAVAR = "#d8dee9"  # Nord4 light gray
rc.STYLE_USAGE = "bold #8fbcbb"
rc.STYLE_OPTION_DEFAULT = "#4c566a"  # Nord3 dim gray
rc.STYLE_REQUIRED_SHORT = "bold #bf616a"  # Nord11 red
rc.STYLE_REQUIRED_LONG = "bold #bf616a"
rc.STYLE_HELPTEXT_FIRST_LINE = "bold"
rc.STYLE_HELPTEXT = "#d8dee9"  # Nord4 light gray
rc.STYLE_OPTION_HELP = "#d8dee9"

# Now import as click
import sys

import rich_click as click
from rich.console import Console

from .. import __version__
from ..ui.display_utils import DisplayUtils
from .config import config
from .constants import BANNER
from .error_handler import CLIError, CLIErrorHandler
from .helpers import load_config
from .ls import ls
from .tail import tail
from .version_check import VersionCheck

console = Console(stderr=True)
display = DisplayUtils(console)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="cwtail")
@click.pass_context
def cli(ctx) -> None:
    """Follow and merge CloudWatch Logs streams in time order.

    QUICK START: cwtail tail -f /my/log-group

    EXAMPLES:
    List groups:             cwtail ls groups
    List streams:            cwtail ls streams /my/log-group
    Follow every stream:     cwtail tail -f /my/log-group
    A time range, filtered:  cwtail tail -g ERROR /my/log-group '*' 2024-05-01T09 10:30

    CONFIGURATION:
    • Configuration file: ~/.config/cwtail/cwtail.yaml (create with 'cwtail config')
    • AWS credentials and region: the usual boto3 sources, or --region
    """
    if ctx.resilient_parsing or ctx.invoked_subcommand == "config":
        return

    try:
        cfg = load_config()
    except CLIError as e:
        CLIErrorHandler().handle_error(e)

    ctx.obj = {"config": cfg}

    checker = VersionCheck.from_config(cfg, __version__)
    checker.start()

    def notify_update() -> None:
        latest = checker.newer_version()
        if latest:
            display.update_available(__version__, latest)

    ctx.call_on_close(notify_update)


# Register commands
cli.add_command(ls)
cli.add_command(tail)
cli.add_command(config)


def main() -> None:
    if "--help" in sys.argv or "-h" in sys.argv or len(sys.argv) == 1:
        console.print(BANNER)

    cli()


if __name__ == "__main__":
    main()
