"""Pomodoro timer commands for FocusFlow."""

import asyncio
from datetime import datetime

import typer
from rich.table import Table

from focusflow.exceptions import NotFoundError
from focusflow.models import PhaseType, utc_now
from focusflow.models.focus.keyboard import get_keyboard_handler
from focusflow.models.focus.ui import TimerDisplay, summary_panel
from focusflow.services.side_effects import ConsoleNotifier, RecordingLiveStatus
from focusflow.services.stats_service import StatsService
from focusflow.services.timer_service import RecoveryOutcome, SessionTimerEngine
from focusflow.utils.exit_codes import ERROR_NOT_FOUND, ERROR_STORAGE
from focusflow.utils.ui.console import get_console
from focusflow.utils.ui.formatters import format_error, format_info, format_warning

from .utils import (
    config_service,
    format_seconds,
    get_session_repository,
    get_task_repository,
    parse_phase,
)

console = get_console()
app = typer.Typer(help="Pomodoro timer for focus sessions")

RECOVERY_MESSAGES = {
    RecoveryOutcome.RESUMED: "Resumed the session left running by the last run.",
    RecoveryOutcome.FINALIZED: "The last session ran out while FocusFlow was closed; it was saved as completed.",
    RecoveryOutcome.DISCARDED: "Discarded a stored session with timestamps in the future.",
}


@app.command("run")
def run_timer(
    phase: str | None = typer.Option(
        None, "--phase", help="Phase to start: focus, short_break or long_break"
    ),
    task_id: str | None = typer.Option(
        None, "--task-id", help="Task credited when focus phases complete"
    ),
    ephemeral: bool = typer.Option(
        False, "--ephemeral", help="Keep sessions in memory only"
    ),
    no_start: bool = typer.Option(
        False, "--no-start", help="Open the timer idle instead of starting"
    ),
):
    """Run the interactive full-screen timer."""
    start_phase = parse_phase(phase)
    service = config_service()
    store = get_session_repository(service, ephemeral)
    tasks = get_task_repository(service, ephemeral)

    task_title = None
    if task_id:
        try:
            task_title = asyncio.run(tasks.get(task_id)).title
        except NotFoundError:
            format_error(f"Task not found: {task_id}")
            raise typer.Exit(ERROR_NOT_FOUND) from None

    settings = service.settings
    engine = SessionTimerEngine(
        store,
        service,
        user_id=service.user_id,
        live_status=RecordingLiveStatus(),
        notifications=ConsoleNotifier(console, sound=settings.sound_effects),
        tasks=tasks,
    )
    engine.select_task(task_id)

    try:
        outcome = engine.restore()
        if outcome in RECOVERY_MESSAGES:
            format_info(RECOVERY_MESSAGES[outcome])
        if engine.last_error is not None:
            format_warning(f"Could not check for an interrupted session: {engine.last_error}")
            engine.clear_error()

        if not no_start and engine.snapshot().is_idle:
            engine.start(start_phase)

        display = TimerDisplay(console, settings.long_break_interval)
        display.run(engine, get_keyboard_handler(), task_title=task_title)
    finally:
        engine.close()

    console.print(
        summary_panel(StatsService.quick_stats(engine, daily_goal=settings.daily_goal))
    )
    if engine.snapshot().is_running:
        console.print(
            "[dim]The current phase is saved; run 'focusflow timer run' again to pick it up.[/dim]"
        )
    if engine.last_error is not None:
        format_error(str(engine.last_error))
        raise typer.Exit(ERROR_STORAGE)


@app.command("status")
def timer_status():
    """Show the session left in progress, if any."""
    service = config_service()
    store = get_session_repository(service)

    try:
        record = asyncio.run(store.load_most_recent_incomplete(service.user_id))
    except Exception as e:
        format_error(f"Failed to read sessions: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    if record is None:
        console.print("[dim]No session in progress.[/dim]")
        return

    elapsed = (utc_now() - record.start_time).total_seconds()
    remaining = max(record.total_seconds - elapsed, 0)
    console.print(
        f"[bold]{record.phase_type.display_name}[/bold] started "
        f"{_local(record.start_time):%H:%M} ({record.duration_minutes} min)"
    )
    if remaining > 0:
        console.print(f"Remaining: [cyan]{format_seconds(remaining)}[/cyan]")
    else:
        console.print("[yellow]Time is up; it will be saved on the next 'timer run'.[/yellow]")


@app.command("history")
def timer_history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of sessions to show"),
    phase: str | None = typer.Option(None, "--phase", help="Only show this phase type"),
):
    """Show Pomodoro session history."""
    phase_filter = parse_phase(phase)
    service = config_service()
    store = get_session_repository(service)

    try:
        # Over-fetch so filtering by phase still fills the table
        fetch = None if phase_filter else limit
        records = asyncio.run(store.list_sessions(service.user_id, limit=fetch))
    except Exception as e:
        format_error(f"Failed to read sessions: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    if phase_filter:
        records = [r for r in records if r.phase_type is phase_filter][:limit]

    if not records:
        console.print("[yellow]No timer sessions found[/yellow]")
        return

    table = Table(title=f"Recent Timer Sessions ({len(records)})", show_header=True)
    table.add_column("Date", style="cyan")
    table.add_column("Type")
    table.add_column("Task")
    table.add_column("Duration", justify="right")
    table.add_column("Status", justify="center")

    for record in records:
        if record.skipped:
            status, color = "skipped", "yellow"
        elif record.completed:
            status, color = "✓", "green"
        else:
            status, color = "○", "dim"

        table.add_row(
            f"{_local(record.start_time):%Y-%m-%d %H:%M}",
            record.phase_type.display_name,
            (record.task_id or "—")[:12] if record.phase_type is PhaseType.FOCUS else "—",
            f"{record.duration_minutes}m",
            f"[{color}]{status}[/{color}]",
        )

    console.print(table)


def _local(moment: datetime) -> datetime:
    return moment.astimezone()
