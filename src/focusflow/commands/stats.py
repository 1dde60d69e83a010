"""Statistics commands for focus sessions."""

import asyncio

import typer

from focusflow.models.focus.analytics import FocusStats
from focusflow.services.stats_service import StatsService
from focusflow.utils.exit_codes import ERROR_STORAGE
from focusflow.utils.ui.console import get_console
from focusflow.utils.ui.formatters import format_error

from .utils import config_service, format_minutes, get_session_repository

console = get_console()


def render_progress_bar(value: float, max_value: float, width: int = 10) -> str:
    """Render a progress bar using block characters."""
    if max_value <= 0:
        ratio = 0.0
    else:
        ratio = min(value / max_value, 1.0)
    filled = int(ratio * width)
    return "█" * filled + "░" * (width - filled)


def show_stats(
    days: int | None = typer.Option(
        None, "--days", help="Only count the last N days (default: all history)"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format (json)"),
):
    """Show focus totals, today's goal progress, streak and this week."""
    service = config_service()
    stats_service = StatsService(get_session_repository(service), service.user_id)

    try:
        stats = asyncio.run(
            stats_service.collect(daily_goal=service.settings.daily_goal, days=days)
        )
    except Exception as e:
        format_error(f"Failed to read sessions: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    if output == "json":
        console.print_json(data=_as_dict(stats))
        return

    console.print("\n[bold cyan]🍅 Focus Statistics[/bold cyan]\n")
    console.print(f"Focus sessions completed: [bold]{stats.focus_completed}[/bold]")
    console.print(f"Total phases completed: {stats.total_completed} ({stats.skipped} skipped)")
    console.print(f"Focus time: {format_minutes(stats.focus_minutes)}")
    console.print()

    goal_bar = render_progress_bar(stats.today_count, stats.daily_goal)
    console.print(
        f"Today: {goal_bar} {stats.today_count}/{stats.daily_goal} "
        f"({int(stats.goal_progress * 100)}%)"
    )
    streak_unit = "day" if stats.current_streak == 1 else "days"
    console.print(f"Current streak: [bold]{stats.current_streak}[/bold] {streak_unit}")
    console.print()

    console.print("[bold]This week[/bold]")
    peak = max((d.count for d in stats.weekly), default=0)
    for day in stats.weekly:
        console.print(f"  {day.day}  {render_progress_bar(day.count, peak)}  {day.count}")
    console.print()


def _as_dict(stats: FocusStats) -> dict:
    return {
        "total_completed": stats.total_completed,
        "focus_completed": stats.focus_completed,
        "skipped": stats.skipped,
        "focus_minutes": stats.focus_minutes,
        "today_count": stats.today_count,
        "daily_goal": stats.daily_goal,
        "goal_progress": stats.goal_progress,
        "current_streak": stats.current_streak,
        "weekly": [
            {"day": d.day, "date": d.date.isoformat(), "count": d.count}
            for d in stats.weekly
        ],
    }
