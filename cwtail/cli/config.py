"""Create the cwtail configuration file."""

import rich_click as click
from rich.console import Console

from ..config import Config
from ..io.directories import get_config_path
from ..ui.display_utils import DisplayUtils

console = Console(stderr=True)
display = DisplayUtils(console)


@click.command()
@click.option(
    "--force", "-f", is_flag=True, help="Overwrite existing configuration file"
)
def config(force: bool):
    """Create a configuration file with example settings.

    Creates ~/.config/cwtail/cwtail.yaml (or under $XDG_CONFIG_HOME) with
    the default settings and comments for customization.
    """
    config_path = get_config_path()

    if config_path.exists() and not force:
        display.warning(
            f"Config file already exists at: {config_path}", use_panel=False
        )
        display.info("Use --force to overwrite", use_panel=False)
        return

    config_path.parent.mkdir(parents=True, exist_ok=True)
    Config.write_example_config(config_path)

    display.success("◆ Created configuration file")
    display.info(f"Location: {config_path}", use_panel=False)
    display.dim("\nEdit the file to customize settings")
