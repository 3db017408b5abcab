"""Progress indicators for CLI operations.

This module provides Rich-based progress utilities for consistent
user feedback across all CLI commands.
"""

from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from rich.status import Status

# Shared console instance
console = Console()


@contextmanager
def api_spinner(message: str) -> Generator[Status, None, None]:
    """Spinner for API calls with unknown duration.

    Usage:
        with api_spinner("Creating account..."):
            asyncio.run(auth.signup(details))

    Args:
        message: Status message to display during operation

    Yields:
        Rich Status object for updating the message if needed
    """
    with console.status(f"[bold green]{message}", spinner="dots") as status:
        yield status


@contextmanager
def login_progress(module_id: str) -> Generator[Status, None, None]:
    """Spinner shown while a login is in flight.

    Redirect logins wait on the user in the browser window, so the message
    says so.

    Args:
        module_id: Authentication strategy in use

    Yields:
        Rich Status object
    """
    if module_id == "basic":
        message = "[bold blue]Logging in..."
    else:
        message = f"[bold blue]Waiting for {module_id} login in the browser window..."
    with console.status(message, spinner="dots") as status:
        yield status


def print_success(message: str) -> None:
    """Print a success message with checkmark.

    Args:
        message: Success message to display
    """
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: Warning message to display
    """
    console.print(f"[yellow]⚠[/yellow] {message}")

