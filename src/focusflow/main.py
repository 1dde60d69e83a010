"""Main entry point for FocusFlow."""

import typer

from focusflow import __version__
from focusflow.commands import config, stats, tasks, timer
from focusflow.utils.logger import get_logger
from focusflow.utils.ui.console import get_console

app = typer.Typer(
    name="focusflow",
    help="Pomodoro focus timer with persistent session history",
    no_args_is_help=True,
)

console = get_console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Echo warnings and errors to stderr"
    ),
) -> None:
    """Configure logging before any command runs."""
    get_logger(verbose=verbose)


# Add subcommands
app.add_typer(timer.app, name="timer", help="Pomodoro timer for focus sessions")
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.command("stats")(stats.show_stats)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]FocusFlow[/bold] version [cyan]{__version__}[/cyan]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
