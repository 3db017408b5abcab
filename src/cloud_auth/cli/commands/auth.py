"""Authentication CLI commands."""

from typing import Annotated

import typer
from rich.console import Console

from cloud_auth.auth.models import AuthModuleId, LoginOptions, UserDetails
from cloud_auth.auth.playwright_host import PlaywrightBrowser
from cloud_auth.cli.progress import api_spinner, login_progress, print_success, print_warning
from cloud_auth.cli.utils import handle_auth_errors, run_with_auth
from cloud_auth.config import get_settings
from cloud_auth.container import AuthContainer

console = Console()
app = typer.Typer(help="Authentication commands")
reset_app = typer.Typer(help="Reset a forgotten password")


@app.command()
@handle_auth_errors
def status():
    """Show current authentication status."""

    async def _status(container: AuthContainer):
        return container.auth.is_authenticated(), container.user_service.current()

    authenticated, user = run_with_auth(_status)

    if not authenticated:
        console.print("[red]Not logged in[/red]")
        console.print("\nLog in with: [cyan]cloud-auth login basic --email you@example.com[/cyan]")
        raise typer.Exit(1)

    console.print("[green]Logged in[/green]")
    if not user.is_anonymous():
        console.print(f"User ID: [cyan]{user.id}[/cyan]")
        if user.details.get("email"):
            console.print(f"Email: [bold]{user.details['email']}[/bold]")


@app.command("login")
@handle_auth_errors
def do_login(
    module: Annotated[
        AuthModuleId,
        typer.Argument(help="Login method (basic, custom, or a social provider)"),
    ] = AuthModuleId.BASIC,
    email: Annotated[
        str | None,
        typer.Option("--email", "-e", help="Email address (basic login)"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-p", help="Password (basic login; prompted if omitted)"),
    ] = None,
    remember: Annotated[
        bool,
        typer.Option(
            "--remember/--no-remember",
            help="Keep the token in the system keychain (otherwise only for this process)",
        ),
    ] = True,
    headless: Annotated[
        bool,
        typer.Option("--headless/--no-headless", help="Run the login browser in headless mode"),
    ] = False,
):
    """
    Log in to the cloud backend.

    Basic login sends your email and password. Other methods open a browser
    window for you to sign in with the provider.
    """
    credentials: dict[str, str] = {}
    if module is AuthModuleId.BASIC:
        if not email:
            email = typer.prompt("Email")
        if not password:
            password = typer.prompt("Password", hide_input=True)
        credentials = {"email": email, "password": password}

    if not remember:
        print_warning("Token will not be remembered after this command exits.")

    options = LoginOptions(remember=remember)
    browser = PlaywrightBrowser(get_settings(), headless=headless)

    async def _login(container: AuthContainer):
        return await container.auth.login(module, credentials, options)

    with login_progress(module.value):
        result = run_with_auth(_login, browser=browser)

    print_success("Login successful!")
    if result.signup:
        console.print("  [dim]A new account was created for you.[/dim]")


@app.command("logout")
@handle_auth_errors
def do_logout():
    """Remove the stored token and cached user."""

    async def _logout(container: AuthContainer):
        was_authenticated = container.auth.is_authenticated()
        container.auth.logout()
        return was_authenticated

    if run_with_auth(_logout):
        print_success("Logged out.")
    else:
        print_warning("No token found to remove.")


@app.command("signup")
@handle_auth_errors
def do_signup(
    email: Annotated[str, typer.Option("--email", "-e", prompt=True, help="Email address")],
    password: Annotated[
        str,
        typer.Option("--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True),
    ],
    username: Annotated[str | None, typer.Option("--username", help="Username")] = None,
    name: Annotated[str | None, typer.Option("--name", help="Full name")] = None,
):
    """
    Create an email/password account.

    Signing up does not log you in; run 'cloud-auth login basic' afterwards.
    """
    details = UserDetails(email=email, password=password, username=username, name=name)

    async def _signup(container: AuthContainer):
        await container.auth.signup(details)

    with api_spinner("Creating account..."):
        run_with_auth(_signup)

    print_success(f"Account created for {email}.")
    console.print("\nLog in with: [cyan]cloud-auth login basic --email " + email + "[/cyan]")


@reset_app.command("request")
@handle_auth_errors
def reset_request(
    email: Annotated[str, typer.Argument(help="Email address of the account")],
):
    """Email a password reset code."""

    async def _request(container: AuthContainer):
        await container.auth.request_password_reset(email)

    with api_spinner("Requesting password reset..."):
        run_with_auth(_request)

    print_success(f"Reset code sent to {email}.")
    console.print("\nConfirm with: [cyan]cloud-auth reset-password confirm <code>[/cyan]")


@reset_app.command("confirm")
@handle_auth_errors
def reset_confirm(
    code: Annotated[str, typer.Argument(help="Reset code from the email")],
    new_password: Annotated[
        str,
        typer.Option("--new-password", prompt=True, hide_input=True, confirmation_prompt=True),
    ],
):
    """Set a new password using the emailed reset code."""

    async def _confirm(container: AuthContainer):
        await container.auth.confirm_password_reset(code, new_password)

    with api_spinner("Updating password..."):
        run_with_auth(_confirm)

    print_success("Password updated. You can now log in with your new password.")


@reset_app.command("url")
@handle_auth_errors
def reset_url():
    """Show the hosted password reset page."""

    async def _url(container: AuthContainer):
        return container.auth.password_reset_url

    console.print(run_with_auth(_url))
