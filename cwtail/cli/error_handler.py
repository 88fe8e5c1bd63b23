"""Standardized error handling for CLI commands."""

import sys
from enum import Enum
from typing import Any, Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..core.exceptions import (
    BackendError,
    CwTailError,
    GroupNotFoundError,
    InvalidFilterError,
    InvalidRangeError,
    NoMatchingStreamsError,
    StreamNotFoundError,
    ThrottledError,
)


class ErrorType(Enum):
    """Categories of errors for appropriate handling."""

    CONFIG = "Configuration Error"
    VALIDATION = "Validation Error"
    NOT_FOUND = "Not Found"
    BACKEND = "Backend Error"
    RUNTIME = "Runtime Error"


class CLIError(Exception):
    """Base exception for CLI-specific errors."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.RUNTIME,
        suggestion: Optional[str] = None,
        exit_code: int = 1,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.suggestion = suggestion
        self.exit_code = exit_code


class ConfigError(CLIError):
    """Configuration-related errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, ErrorType.CONFIG, suggestion, exit_code=2)


class ValidationError(CLIError):
    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, ErrorType.VALIDATION, suggestion, exit_code=3)


class NotFoundError(CLIError):
    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, ErrorType.NOT_FOUND, suggestion, exit_code=4)


class BackendFailure(CLIError):
    """Backend errors (outages, throttling, credentials)."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, ErrorType.BACKEND, suggestion, exit_code=5)


def translate_error(error: CwTailError) -> CLIError:
    """Map an engine error onto the CLI error it should be reported as."""
    if isinstance(error, InvalidRangeError):
        return ValidationError(
            str(error), "Give a START that is strictly before END (times are UTC)"
        )
    if isinstance(error, InvalidFilterError):
        return ValidationError(str(error), "Check the --grep pattern or --filter-mode")
    if isinstance(error, GroupNotFoundError):
        return NotFoundError(
            str(error), "Run 'cwtail ls groups' to see available groups"
        )
    if isinstance(error, StreamNotFoundError):
        return NotFoundError(
            str(error), f"Run 'cwtail ls streams {error.group}' to see its streams"
        )
    if isinstance(error, NoMatchingStreamsError):
        return NotFoundError(str(error), "Use '*' to tail every stream in the group")
    if isinstance(error, ThrottledError):
        return BackendFailure(str(error), "Lower rate_limiting.requests_per_second")
    if isinstance(error, BackendError):
        return BackendFailure(str(error), "Check credentials, region and connectivity")
    return CLIError(str(error))


class CLIErrorHandler:
    """Centralized error handling for CLI commands."""

    def __init__(self, console: Optional[Console] = None, debug: bool = False):
        self.console = console or Console(stderr=True)
        self.debug = debug

    def handle_error(self, error: Exception) -> None:
        """Handle an error with appropriate formatting and exit code."""
        if isinstance(error, KeyboardInterrupt):
            self._handle_interrupt()
        elif isinstance(error, CwTailError):
            self._handle_cli_error(translate_error(error))
        elif isinstance(error, CLIError):
            self._handle_cli_error(error)
        else:
            self._handle_unexpected_error(error)

    def _handle_interrupt(self) -> None:
        """Handle keyboard interrupt gracefully."""
        self.console.print("\n[yellow]✗ Operation cancelled by user[/yellow]")
        sys.exit(130)  # Standard exit code for SIGINT

    def _handle_cli_error(self, error: CLIError) -> None:
        """Handle known CLI errors with formatting."""
        error_text = Text()
        error_text.append(f"✗ {error.error_type.value}: ", style="bold red")
        error_text.append(str(error))

        if error.suggestion:
            error_text.append("\n\n", style="")
            error_text.append("💡 Suggestion: ", style="bold yellow")
            error_text.append(error.suggestion, style="yellow")

        panel = Panel(
            error_text,
            title="[bold red]Error[/bold red]",
            border_style="red",
            expand=False,
        )
        self.console.print(panel)

        if self.debug:
            self.console.print("\n[dim]Debug traceback:[/dim]")
            self.console.print_exception(show_locals=True)

        sys.exit(error.exit_code)

    def _handle_unexpected_error(self, error: Exception) -> None:
        """Handle unexpected errors with full traceback."""
        error_text = Text()
        error_text.append("✗ Unexpected error: ", style="bold red")
        error_text.append(str(error))

        panel = Panel(
            error_text,
            title="[bold red]Unexpected Error[/bold red]",
            border_style="red",
            expand=False,
        )
        self.console.print(panel)

        self.console.print("\n[dim]Full traceback:[/dim]")
        self.console.print_exception(show_locals=self.debug)

        sys.exit(1)

    def wrap_command(self, func: Callable) -> Callable:
        """Decorator to wrap CLI commands with error handling.

        Usage:
            @error_handler.wrap_command
            def my_command():
                ...
        """

        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except (CwTailError, CLIError, KeyboardInterrupt) as e:
                self.handle_error(e)

        return wrapper
