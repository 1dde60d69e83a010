"""Focus mode - Pomodoro sequencing, durations, state and analytics."""

from .analytics import DayCount, FocusStats, summarize
from .cycling import next_phase, progress_dots, should_auto_start
from .durations import preview_seconds, resolve_duration
from .state import (
    EngineSnapshot,
    EngineState,
    EngineStatus,
    IdleState,
    PausedState,
    RunningState,
    build_snapshot,
)

__all__ = [
    "DayCount",
    "EngineSnapshot",
    "EngineState",
    "EngineStatus",
    "FocusStats",
    "IdleState",
    "PausedState",
    "RunningState",
    "build_snapshot",
    "next_phase",
    "preview_seconds",
    "progress_dots",
    "resolve_duration",
    "should_auto_start",
    "summarize",
]
