"""Config CLI commands for managing settings."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cloud_auth.config import CONFIG_PATH, Settings, get_settings, load_config, save_config, validate_app_id

console = Console()
app = typer.Typer(help="Manage configuration")

# Settings that can be configured via the config command
CONFIGURABLE_KEYS = {
    "app_id": {
        "description": "App ID registered with the backend",
        "type": "str",
        "example": "a1b2c3d4",
    },
    "api_url": {
        "description": "Base URL of the cloud API",
        "type": "str",
        "example": "https://api.ionic.io",
    },
    "web_url": {
        "description": "Base URL of the web dashboard",
        "type": "str",
        "example": "https://web.ionic.io",
    },
    "auth_host": {
        "description": "Host social logins redirect back to",
        "type": "str",
        "example": "auth.ionic.io",
    },
    "timeout": {
        "description": "HTTP timeout in seconds (5-120)",
        "type": "int",
        "example": "30",
    },
    "headless": {
        "description": "Run login browser in headless mode",
        "type": "bool",
        "example": "false",
    },
}


def parse_value(key: str, value: str) -> str | int | bool:
    """Parse string value to appropriate type based on key."""
    key_info = CONFIGURABLE_KEYS.get(key)
    if not key_info:
        return value

    value_type = key_info["type"]

    if value_type == "bool":
        return value.lower() in ("true", "1", "yes")
    elif value_type == "int":
        try:
            return int(value)
        except ValueError:
            raise typer.BadParameter(f"'{value}' is not a valid number")
    return value


def validate_value(key: str, value: str | int | bool) -> None:
    """Validate a config value."""
    if key == "timeout":
        if not isinstance(value, int) or not (5 <= value <= 120):
            raise typer.BadParameter("timeout must be between 5 and 120")
    elif key == "app_id":
        try:
            validate_app_id(str(value))
        except ValueError as e:
            raise typer.BadParameter(str(e))
    elif key in ("api_url", "web_url"):
        if not str(value).startswith(("http://", "https://")):
            raise typer.BadParameter(f"{key} must start with http:// or https://")


@app.command("show")
def config_show():
    """
    Show all configuration settings.

    Examples:
        cloud-auth config show
    """
    config = load_config()
    settings = get_settings()
    defaults = Settings.model_fields

    table = Table(title="cloud-auth configuration", show_header=True)
    table.add_column("Setting", style="cyan", width=12)
    table.add_column("Value", style="green", width=28)
    table.add_column("Source", style="dim", width=12)
    table.add_column("Description", style="dim", width=35)

    for key, info in CONFIGURABLE_KEYS.items():
        file_value = config.get(key)
        effective_value = getattr(settings, key, None)

        if file_value is not None:
            source = "config.yaml"
            display_value = str(file_value)
        elif effective_value is not None and effective_value != defaults[key].default:
            source = "env var"
            display_value = str(effective_value)
        elif effective_value is not None:
            source = "default"
            display_value = f"[dim]{effective_value}[/dim]"
        else:
            source = "-"
            display_value = "[dim]not set[/dim]"

        table.add_row(key, display_value, source, info["description"])

    console.print(table)
    console.print()
    console.print(f"[dim]Config file: {CONFIG_PATH}[/dim]")


@app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Setting name")],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """
    Set a configuration value.

    Examples:
        cloud-auth config set app_id a1b2c3d4
        cloud-auth config set timeout 60
    """
    if key not in CONFIGURABLE_KEYS:
        console.print(f"[red]Unknown setting:[/red] {key}")
        console.print()
        console.print("[bold]Available settings:[/bold]")
        for k, info in CONFIGURABLE_KEYS.items():
            console.print(f"  [cyan]{k}[/cyan] - {info['description']}")
        raise typer.Exit(1)

    parsed_value = parse_value(key, value)
    validate_value(key, parsed_value)

    config = load_config()
    config[key] = parsed_value
    save_config(config)

    console.print(f"[green]✓[/green] {key} = {parsed_value}")
