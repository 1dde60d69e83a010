"""Shared helpers for command modules."""

from __future__ import annotations

import typer

from focusflow.adapters.memory import InMemorySessionRepository, InMemoryTaskRepository
from focusflow.adapters.sqlite import SqliteSessionRepository, SqliteTaskRepository
from focusflow.models import PhaseType
from focusflow.repositories import SessionRepository, TaskRepository
from focusflow.services.config_service import ConfigService, get_config_service
from focusflow.utils.exit_codes import ERROR_INVALID_ARGS
from focusflow.utils.ui.formatters import format_error

PHASE_ALIASES = {
    "focus": PhaseType.FOCUS,
    "work": PhaseType.FOCUS,
    "short": PhaseType.SHORT_BREAK,
    "short_break": PhaseType.SHORT_BREAK,
    "short-break": PhaseType.SHORT_BREAK,
    "long": PhaseType.LONG_BREAK,
    "long_break": PhaseType.LONG_BREAK,
    "long-break": PhaseType.LONG_BREAK,
}


def config_service() -> ConfigService:
    """Config service used by every command."""
    return get_config_service()


def get_session_repository(
    service: ConfigService | None = None, ephemeral: bool = False
) -> SessionRepository:
    """Session store for the configured database, or an in-memory one."""
    if ephemeral:
        return InMemorySessionRepository()
    service = service or config_service()
    return SqliteSessionRepository(service.db_path)


def get_task_repository(
    service: ConfigService | None = None, ephemeral: bool = False
) -> TaskRepository:
    """Task store for the configured database, or an in-memory one."""
    if ephemeral:
        return InMemoryTaskRepository()
    service = service or config_service()
    return SqliteTaskRepository(service.db_path)


def parse_phase(value: str | None) -> PhaseType | None:
    """Resolve a phase name from the command line; exits on unknown names."""
    if value is None:
        return None
    phase = PHASE_ALIASES.get(value.strip().lower())
    if phase is None:
        format_error(
            f"Unknown phase '{value}'. Use one of: focus, short_break, long_break"
        )
        raise typer.Exit(ERROR_INVALID_ARGS)
    return phase


def format_minutes(minutes: float) -> str:
    """Format minutes as hours and minutes."""
    hours = int(minutes // 60)
    mins = int(minutes % 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_seconds(seconds: float) -> str:
    """MM:SS, rounding partial seconds up."""
    whole = int(seconds)
    if seconds > whole:
        whole += 1
    return f"{whole // 60:02d}:{whole % 60:02d}"
