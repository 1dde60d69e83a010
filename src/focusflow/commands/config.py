"""Configuration management commands."""

from typing import Optional

import typer

from focusflow.exceptions import ConfigError
from focusflow.utils.exit_codes import ERROR_GENERAL, ERROR_INVALID_ARGS, ERROR_NOT_FOUND
from focusflow.utils.ui.console import get_console
from focusflow.utils.ui.formatters import (
    OUTPUT_FORMATS,
    format_error,
    format_output,
    format_success,
    format_warning,
)

from .utils import config_service

app = typer.Typer(help="Configuration management commands")
console = get_console()


@app.command("show")
def show_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show current configuration."""
    if output not in OUTPUT_FORMATS:
        format_error(f"Unknown output format '{output}'")
        raise typer.Exit(ERROR_INVALID_ARGS)
    service = config_service()
    format_output(service.config.model_dump(), output)
    console.print(f"[dim]Config file: {service.config_path}[/dim]")


@app.command("get")
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., timer.focus_minutes)"),
) -> None:
    """Get a configuration value."""
    try:
        value = config_service().get(key)
    except KeyError:
        format_error(f"Configuration key '{key}' not found")
        raise typer.Exit(ERROR_NOT_FOUND) from None
    console.print(value)


@app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., timer.focus_minutes)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value: str | int | bool | None = value
    if value.lower() in ("true", "false"):
        parsed_value = value.lower() == "true"
    elif value.lower() in ("none", "null", ""):
        parsed_value = None
    elif value.isdigit():
        parsed_value = int(value)

    try:
        config_service().set(key, parsed_value)
    except KeyError:
        format_error(f"Configuration key '{key}' not found")
        raise typer.Exit(ERROR_NOT_FOUND) from None
    except ConfigError as e:
        format_error(str(e))
        raise typer.Exit(ERROR_INVALID_ARGS) from e

    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        confirm = typer.confirm("Reset all settings to defaults?", default=False)
        if not confirm:
            format_warning("Reset cancelled.")
            return

    try:
        config_service().reset_config()
    except ConfigError as e:
        format_error(str(e))
        raise typer.Exit(ERROR_GENERAL) from e
    format_success("Configuration reset to defaults")
