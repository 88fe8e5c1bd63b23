"""XDG Base Directory support for cwtail."""

import os
from pathlib import Path


def get_config_dir() -> Path:
    """Get the configuration directory for cwtail.

    Returns ~/.config/cwtail/ by default, or respects $XDG_CONFIG_HOME if set.
    Creates the directory if it doesn't exist.

    Returns:
        Path to the configuration directory
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        config_dir = Path(xdg_config_home) / "cwtail"
    else:
        config_dir = Path.home() / ".config" / "cwtail"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Path of the user configuration file (may not exist yet)."""
    return get_config_dir() / "cwtail.yaml"
