"""Shell completion of group and stream names."""

from typing import List

from ..core.exceptions import CwTailError
from ..io.logger import get_logger
from .error_handler import CLIError
from .helpers import list_names, load_config

logger = get_logger("completion")


def complete_groups(ctx, param, incomplete: str) -> List[str]:
    """Complete a group argument from the live group listing."""
    try:
        return list_names(load_config(), prefix=incomplete or None)
    except (CwTailError, CLIError) as e:
        logger.debug(f"Group completion failed: {e}")
        return []


def complete_streams(ctx, param, incomplete: str) -> List[str]:
    """Complete a stream argument from the streams of the chosen group."""
    group = ctx.params.get("group")
    if not group:
        return []
    try:
        return list_names(load_config(), group=group, prefix=incomplete or None)
    except (CwTailError, CLIError) as e:
        logger.debug(f"Stream completion failed: {e}")
        return []
