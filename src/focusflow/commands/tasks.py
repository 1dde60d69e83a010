"""Task management commands.

The task list is local and minimal: it exists so focus phases can be linked
to something with ``focusflow timer run --task-id``.
"""

import asyncio

import typer
from rich.table import Table

from focusflow.exceptions import NotFoundError
from focusflow.services.task_service import TaskService
from focusflow.utils.exit_codes import ERROR_NOT_FOUND, ERROR_STORAGE
from focusflow.utils.ui.console import get_console
from focusflow.utils.ui.formatters import format_error, format_info, format_success

from .utils import get_task_repository

app = typer.Typer(help="Task management commands")
console = get_console()


@app.command("add")
def add_task(
    title: str = typer.Argument(..., help="Task title"),
    estimate: int = typer.Option(1, "--estimate", "-e", min=0, help="Estimated pomodoros"),
    notes: str = typer.Option("", "--notes", help="Notes"),
) -> None:
    """Add a task."""
    service = TaskService(get_task_repository())
    try:
        task = asyncio.run(
            service.add_task(title, notes=notes, estimated_pomodoros=estimate)
        )
    except Exception as e:
        format_error(f"Failed to add task: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    format_success(f"Added task {task.id}")
    console.print(f"[dim]Start it with: focusflow timer run --task-id {task.id}[/dim]")


@app.command("list")
def list_tasks(
    all_tasks: bool = typer.Option(False, "--all", help="Include completed tasks"),
    limit: int | None = typer.Option(None, "--limit", help="Limit results"),
) -> None:
    """List tasks with their pomodoro progress."""
    service = TaskService(get_task_repository())
    try:
        tasks = asyncio.run(service.list_tasks(include_completed=all_tasks, limit=limit))
    except Exception as e:
        format_error(f"Failed to list tasks: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    table = Table(title=f"Tasks ({len(tasks)})", show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Pomodoros", justify="right")
    if all_tasks:
        table.add_column("Done", justify="center")

    for task in tasks:
        row = [task.id, task.title, f"{task.completed_pomodoros}/{task.estimated_pomodoros}"]
        if all_tasks:
            row.append("[green]✓[/green]" if task.is_completed else "")
        table.add_row(*row)

    console.print(table)


@app.command("done")
def complete_task(task_id: str = typer.Argument(..., help="Task ID")) -> None:
    """Mark a task as completed."""
    service = TaskService(get_task_repository())
    try:
        task = asyncio.run(service.complete_task(task_id))
    except NotFoundError:
        format_error(f"Task not found: {task_id}")
        raise typer.Exit(ERROR_NOT_FOUND) from None
    except Exception as e:
        format_error(f"Failed to complete task: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    format_success(f"Completed: {task.title}")


@app.command("reopen")
def reopen_task(task_id: str = typer.Argument(..., help="Task ID")) -> None:
    """Reopen a completed task."""
    service = TaskService(get_task_repository())
    try:
        task = asyncio.run(service.reopen_task(task_id))
    except NotFoundError:
        format_error(f"Task not found: {task_id}")
        raise typer.Exit(ERROR_NOT_FOUND) from None
    except Exception as e:
        format_error(f"Failed to reopen task: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    format_success(f"Reopened: {task.title}")


@app.command("delete")
def delete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task. Past sessions keep their link to its id."""
    if not yes and not typer.confirm(f"Are you sure you want to delete task {task_id}?"):
        format_info("Cancelled")
        raise typer.Exit(0)

    service = TaskService(get_task_repository())
    try:
        deleted = asyncio.run(service.delete_task(task_id))
    except Exception as e:
        format_error(f"Failed to delete task: {e}")
        raise typer.Exit(ERROR_STORAGE) from e

    if not deleted:
        format_error(f"Task not found: {task_id}")
        raise typer.Exit(ERROR_NOT_FOUND)
    format_success(f"Deleted task {task_id}")
