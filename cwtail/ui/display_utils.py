"""Unified display utilities for consistent error, warning, and info messages.

This module provides standardized functions for displaying messages throughout
cwtail, ensuring consistent styling. Everything here goes to stderr so that
tailed events on stdout stay pipeable.
"""

from typing import Optional, Union

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..core.types import TailWarning

# Nord color palette
NORD_COLORS = {
    "nord3": "#4c566a",  # Muted gray (dim text)
    "nord4": "#d8dee9",  # Light gray
    "nord7": "#8fbcbb",  # Teal - Info
    "nord8": "#88c0d0",  # Light blue
    "nord11": "#bf616a",  # Red - Errors
    "nord13": "#ebcb8b",  # Yellow - Warnings
    "nord14": "#a3be8c",  # Green - Success
}


class DisplayUtils:
    """Utilities for consistent message display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize display utilities.

        Args:
            console: Rich console instance. If None, creates a stderr console.
        """
        self.console = console or Console(stderr=True)

    def _calculate_panel_width(
        self,
        content: Union[str, Text],
        title: str = "",
        min_width: int = 40,
        max_width: int = 80,
    ) -> int:
        """Calculate appropriate panel width based on content."""
        if isinstance(content, Text):
            lines = content.plain.split("\n")
        else:
            lines = content.split("\n")

        max_line_length = max((len(line) for line in lines), default=0)
        content_width = max(max_line_length, len(title) + 4)

        # +6 for panel borders and padding
        return max(min_width, min(content_width + 6, max_width))

    def _panel(self, content: str, title: str, color: str, max_width: int = 80) -> None:
        width = self._calculate_panel_width(content, title, max_width=max_width)
        self.console.print()
        self.console.print(
            Panel(
                content,
                title=f" {title}",
                title_align="left",
                border_style=color,
                padding=(1, 2),
                width=width,
                expand=False,
            )
        )
        self.console.print()

    def error(
        self,
        message: str,
        title: Optional[str] = None,
        context: Optional[str] = None,
        use_panel: bool = True,
    ) -> None:
        """Display an error message.

        Args:
            message: The error message
            title: Optional title for the panel
            context: Optional context information
            use_panel: Whether to use a panel (True) or plain text (False)
        """
        color = NORD_COLORS["nord11"]
        if use_panel:
            content = message
            if context:
                content += f"\n\nContext: {context}"
            self._panel(content, title or "! Error", color)
        else:
            self.console.print(f"[{color}][FAIL] {message}[/{color}]")
            if context:
                self.dim(f"       {context}")

    def warning(
        self,
        message: str,
        title: Optional[str] = None,
        context: Optional[str] = None,
        use_panel: bool = True,
    ) -> None:
        """Display a warning message.

        Args:
            message: The warning message
            title: Optional title for the panel
            context: Optional context information
            use_panel: Whether to use a panel (True) or plain text (False)
        """
        color = NORD_COLORS["nord13"]
        if use_panel:
            content = message
            if context:
                content += f"\n\n{context}"
            self._panel(content, title or "⚠ Warning", color, max_width=70)
        else:
            self.console.print(f"[{color}]⚠ {message}[/{color}]")
            if context:
                self.dim(f"  {context}")

    def info(
        self, message: str, title: Optional[str] = None, use_panel: bool = True
    ) -> None:
        """Display an info message."""
        color = NORD_COLORS["nord7"]
        if use_panel:
            self._panel(message, title or "◆ Info", color, max_width=70)
        else:
            self.console.print(f"[{color}]◆ {message}[/{color}]")

    def success(self, message: str) -> None:
        color = NORD_COLORS["nord14"]
        self.console.print(f"[{color}][OK] {message}[/{color}]")

    def dim(self, message: str) -> None:
        color = NORD_COLORS["nord3"]
        self.console.print(f"[{color}]{message}[/{color}]")

    def tail_warning(self, warning: TailWarning) -> None:
        """Show a non-fatal tail problem without interrupting the output."""
        context = f"stream: {warning.stream_id}" if warning.stream_id else None
        self.warning(warning.message, context=context, use_panel=False)

    def update_available(self, current: str, latest: str) -> None:
        """Announce a newer published version."""
        green, yellow = NORD_COLORS["nord14"], NORD_COLORS["nord13"]
        self.console.print()
        self.console.print(
            f"[{green}]A new version of cwtail is available![/{green}] - "
            f"[{yellow}]{current}[/{yellow}] -> [{green}]{latest}[/{green}]"
        )
