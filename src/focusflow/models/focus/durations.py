"""Duration policy: configured minutes for each phase type."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from focusflow.models.config_models import TimerSettings
from focusflow.models.session import PhaseType

# (minimum, maximum) minutes accepted from settings
DURATION_BOUNDS: dict[PhaseType, tuple[int, int]] = {
    PhaseType.FOCUS: (15, 60),
    PhaseType.SHORT_BREAK: (1, 15),
    PhaseType.LONG_BREAK: (10, 30),
}

SETTINGS_KEYS: dict[PhaseType, str] = {
    PhaseType.FOCUS: "focus_minutes",
    PhaseType.SHORT_BREAK: "short_break_minutes",
    PhaseType.LONG_BREAK: "long_break_minutes",
}


def _raw_value(phase: PhaseType, settings: TimerSettings | Mapping[str, Any] | None) -> Any:
    if settings is None:
        return None
    key = SETTINGS_KEYS[phase]
    if isinstance(settings, Mapping):
        return settings.get(key)
    return getattr(settings, key, None)


def resolve_duration(
    phase: PhaseType, settings: TimerSettings | Mapping[str, Any] | None = None
) -> int:
    """Resolve the length of ``phase`` in minutes.

    Integral values are clamped into ``DURATION_BOUNDS``. Missing,
    non-integral, boolean or non-positive values fall back to the phase
    default. Never raises.
    """
    value = _raw_value(phase, settings)

    if isinstance(value, bool) or value is None:
        return phase.default_minutes
    if isinstance(value, float):
        if not value.is_integer():
            return phase.default_minutes
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        return phase.default_minutes

    low, high = DURATION_BOUNDS[phase]
    return max(low, min(high, value))


def preview_seconds(
    phase: PhaseType, settings: TimerSettings | Mapping[str, Any] | None = None
) -> int:
    """Duration shown while idle before ``phase`` starts."""
    return resolve_duration(phase, settings) * 60
