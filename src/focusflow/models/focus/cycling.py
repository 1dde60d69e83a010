"""Pomodoro cycling: phase sequencing and auto-start policy."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from focusflow.models.config_models import TimerSettings
from focusflow.models.session import PhaseType

DEFAULT_LONG_BREAK_INTERVAL = 4


def effective_interval(value: int | None) -> int:
    """Long-break interval in use; anything but a positive int means the default."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_LONG_BREAK_INTERVAL
    return value


def next_phase(
    completed: PhaseType,
    prior_focus_count: int,
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL,
) -> PhaseType:
    """Determine the phase that follows ``completed``.

    ``prior_focus_count`` includes the focus phase that just finished, so the
    4th, 8th, ... focus phase is followed by a long break.
    """
    if completed is PhaseType.FOCUS:
        if prior_focus_count % effective_interval(long_break_interval) == 0:
            return PhaseType.LONG_BREAK
        return PhaseType.SHORT_BREAK

    # Both break kinds lead back to focus
    return PhaseType.FOCUS


def should_auto_start(
    completed: PhaseType, settings: TimerSettings | Mapping[str, Any] | None
) -> bool:
    """Whether finishing ``completed`` starts the next phase automatically."""
    key = "auto_start_break" if completed is PhaseType.FOCUS else "auto_start_next_focus"
    if settings is None:
        return False
    if isinstance(settings, Mapping):
        return settings.get(key) is True
    return getattr(settings, key, False) is True


def cycle_position(
    focus_count: int, long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL
) -> int:
    """1-based slot of the next focus phase within the current cycle."""
    return focus_count % effective_interval(long_break_interval) + 1


def progress_dots(
    focus_count: int,
    current_phase: PhaseType,
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL,
) -> str:
    """Render cycle progress, e.g. ``● ● ◉ ○`` for the 3rd focus of 4."""
    interval = effective_interval(long_break_interval)
    done = focus_count % interval
    if done == 0 and focus_count > 0 and current_phase is PhaseType.LONG_BREAK:
        done = interval

    dots = []
    for slot in range(1, interval + 1):
        if slot <= done:
            dots.append("●")  # Completed
        elif slot == done + 1 and current_phase is PhaseType.FOCUS:
            dots.append("◉")  # Current
        else:
            dots.append("○")  # Upcoming

    return " ".join(dots)
