"""Output formatters for different formats."""

import json
from typing import Any

import yaml
from rich.table import Table

from .console import get_console

OUTPUT_FORMATS = ("table", "json", "yaml")


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False))
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        get_console().print(data)


def _plain(data: Any) -> Any:
    # yaml.safe_dump only knows builtin types
    return json.loads(json.dumps(data, default=str))


def format_single_item(item: dict, prefix: str = "") -> None:
    """Format a (possibly nested) mapping as key-value rows."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in _flatten(item, prefix):
        if isinstance(value, bool):
            formatted_value = "✓" if value else "✗"
        elif value is None:
            formatted_value = "-"
        else:
            formatted_value = str(value)
        table.add_row(key, formatted_value)

    get_console().print(table)


def _flatten(item: dict, prefix: str = ""):
    for key, value in item.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _flatten(value, f"{full_key}.")
        else:
            yield full_key, value


def format_error(message: str) -> None:
    """Format and display an error message."""
    get_console().print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    get_console().print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    get_console().print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    get_console().print(f"[bold blue]Info:[/bold blue] {message}")
