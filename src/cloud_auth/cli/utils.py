"""CLI utility functions and decorators."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

import typer
from rich.console import Console

from cloud_auth.cli.errors import format_error
from cloud_auth.container import AuthContainer, build_auth
from cloud_auth.exceptions import CloudAuthError

console = Console()

F = TypeVar("F", bound=Callable)
T = TypeVar("T")


def handle_auth_errors(f: F) -> F:
    """Decorator to turn auth errors in CLI commands into friendly output.

    Catches every ``CloudAuthError`` plus the ``ValueError`` raised when no
    app ID is configured, prints a formatted panel, and exits with code 1.

    Usage:
        @app.command()
        @handle_auth_errors
        def my_command():
            ...
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (CloudAuthError, ValueError) as e:
            format_error(e, console)
            raise typer.Exit(1)

    return wrapper  # type: ignore


def run_with_auth(action: Callable[[AuthContainer], Awaitable[T]], **build_kwargs) -> T:
    """Build the auth container, run ``action`` on it, and close it."""

    async def _run() -> T:
        async with build_auth(**build_kwargs) as container:
            return await action(container)

    return asyncio.run(_run())
