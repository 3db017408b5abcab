"""Main CLI entry point for cloud-auth."""

import logging
from typing import Annotated

import typer

from cloud_auth import __version__
from cloud_auth.cli.commands import auth, config

app = typer.Typer(
    name="cloud-auth",
    help="Log in to the cloud app backend from the command line",
    no_args_is_help=True,
)

app.command("login")(auth.do_login)
app.command("logout")(auth.do_logout)
app.command("status")(auth.status)
app.command("signup")(auth.do_signup)

# Add subcommand groups
app.add_typer(auth.reset_app, name="reset-password", help="Reset a forgotten password")
app.add_typer(config.app, name="config", help="Manage configuration")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cloud-auth {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
):
    """Log in to the cloud app backend from the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
