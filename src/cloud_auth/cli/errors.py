"""User-friendly error messages with actionable suggestions."""

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel

from cloud_auth.exceptions import (
    AuthValidationError,
    CapabilityMissingError,
    CloudAPIError,
    DetailedError,
    InAppBrowserExitError,
    InAppBrowserLoadError,
    TransportError,
    UnknownAuthModuleError,
)


@dataclass
class ErrorInfo:
    """Structured error information for display."""

    title: str
    message: str
    suggestion: str
    command: str | None = None


ERROR_MESSAGES = {
    "invalid_input": ErrorInfo(
        title="Invalid input",
        message="{error}",
        suggestion="Check the values you passed and try again.",
    ),
    "signup_rejected": ErrorInfo(
        title="Signup rejected",
        message="{error}",
        suggestion="Fix the reported fields: {codes}",
    ),
    "unknown_module": ErrorInfo(
        title="Unknown login method",
        message="{error}",
        suggestion="Use one of: basic, custom, twitter, facebook, github, google, instagram, linkedin.",
    ),
    "no_browser": ErrorInfo(
        title="No browser available",
        message="A browser window is needed for this login method.",
        suggestion="Install Playwright and Chromium, or run from a session with a display.",
        command="pip install playwright && playwright install chromium",
    ),
    "browser_closed": ErrorInfo(
        title="Login cancelled",
        message="The login window was closed before the login finished.",
        suggestion="Run the login again and complete it in the browser window.",
    ),
    "browser_load_error": ErrorInfo(
        title="Login page failed to load",
        message="The login window could not load the provider's page.",
        suggestion="Check your internet connection and try again.",
    ),
    "network_error": ErrorInfo(
        title="Network error",
        message="Could not connect to the cloud API.",
        suggestion="Check your internet connection or the configured api_url.",
        command="cloud-auth config show",
    ),
    "auth_failed": ErrorInfo(
        title="Not authorized",
        message="The backend rejected the credentials.",
        suggestion="Check your email and password, or reset your password.",
        command="cloud-auth reset-password request <email>",
    ),
    "server_error": ErrorInfo(
        title="Server error",
        message="The cloud API reported an error.",
        suggestion="This is probably temporary. Try again later.",
    ),
    "api_error": ErrorInfo(
        title="Request failed",
        message="{error}",
        suggestion="Check the request and try again.",
    ),
    "no_app_id": ErrorInfo(
        title="No app ID",
        message="{error}",
        suggestion="Set your app ID in the config file or environment.",
        command="cloud-auth config set app_id <your_app_id>",
    ),
    "unknown": ErrorInfo(
        title="Unexpected error",
        message="An unexpected error occurred.",
        suggestion="If this keeps happening, log out and log in again.",
        command="cloud-auth logout",
    ),
}


def get_error_type(error: Exception) -> str:
    """Determine error type from exception."""
    if isinstance(error, DetailedError):
        return "signup_rejected"
    elif isinstance(error, AuthValidationError):
        return "invalid_input"
    elif isinstance(error, UnknownAuthModuleError):
        return "unknown_module"
    elif isinstance(error, CapabilityMissingError):
        return "no_browser"
    elif isinstance(error, InAppBrowserExitError):
        return "browser_closed"
    elif isinstance(error, InAppBrowserLoadError):
        return "browser_load_error"
    elif isinstance(error, TransportError):
        return "network_error"
    elif isinstance(error, CloudAPIError):
        status = error.status_code
        if status in (401, 403):
            return "auth_failed"
        elif status and status >= 500:
            return "server_error"
        return "api_error"
    elif isinstance(error, ValueError) and "App ID" in str(error):
        return "no_app_id"

    return "unknown"


def format_error(
    error: Exception,
    console: Console,
    verbose: bool = False,
) -> None:
    """Format and display a user-friendly error message."""
    error_type = get_error_type(error)
    info = ERROR_MESSAGES.get(error_type, ERROR_MESSAGES["unknown"])

    message = info.message.format(error=error)
    suggestion = info.suggestion
    if "{codes}" in suggestion:
        suggestion = suggestion.format(codes=", ".join(getattr(error, "details", [])) or "-")

    content_lines = [
        f"[white]{message}[/white]",
        "",
        f"[yellow]Suggestion:[/yellow] {suggestion}",
    ]

    if info.command:
        content_lines.append("")
        content_lines.append(f"[cyan]{info.command}[/cyan]")

    # Show technical details in verbose mode
    if verbose:
        content_lines.append("")
        content_lines.append("[dim]" + "─" * 40 + "[/dim]")
        content_lines.append(f"[dim]Type: {type(error).__name__}[/dim]")
        content_lines.append(f"[dim]Details: {error}[/dim]")

    console.print()
    console.print(Panel(
        "\n".join(content_lines),
        title=f"[red bold]Error: {info.title}[/red bold]",
        border_style="red",
        padding=(1, 2),
    ))
    console.print()
