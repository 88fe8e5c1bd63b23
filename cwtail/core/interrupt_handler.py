"""Interrupt handling for tail sessions."""

import signal
from typing import Optional

from rich.console import Console

from .clock import CancellationToken


class InterruptHandler:
    """Turns Ctrl+C into a cancellation request for a tail session."""

    def __init__(self, token: CancellationToken, console: Optional[Console] = None):
        """Initialize interrupt handler.

        Args:
            token: Cancellation token of the running session
            console: Optional console for user feedback
        """
        self.token = token
        self.console = console
        self.interrupt_requested = False
        self._original_sigint_handler = None

    def setup_interrupt_handler(self):
        """Set up Ctrl+C as cancellation trigger."""

        def handle_interrupt(signum, frame):
            if self.interrupt_requested:
                # Second Ctrl+C falls through to the default behaviour
                self.restore_interrupt_handler()
                raise KeyboardInterrupt
            self.interrupt_requested = True
            if self.console:
                from ..ui.display_utils import DisplayUtils

                display = DisplayUtils(self.console)
                display.dim("Stopping...")
            self.token.cancel_threadsafe()

        self._original_sigint_handler = signal.signal(signal.SIGINT, handle_interrupt)

    def restore_interrupt_handler(self):
        """Restore original interrupt handler."""
        if self._original_sigint_handler:
            signal.signal(signal.SIGINT, self._original_sigint_handler)
            self._original_sigint_handler = None

    def __enter__(self):
        self.setup_interrupt_handler()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore_interrupt_handler()
        return False

    def check_interrupt(self) -> bool:
        """Check if an interrupt was requested."""
        return self.interrupt_requested
