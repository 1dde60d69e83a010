"""Timer engine state.

``EngineState`` is a tagged union: only the running and paused variants carry
a session, so a running timer without a session record cannot be expressed.
Observers receive ``EngineSnapshot`` values, which are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from focusflow.models.session import PhaseType, SessionRecord


class EngineStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class IdleState:
    """Nothing is timing. ``phase`` is the phase the next start will use."""

    phase: PhaseType
    preview_seconds: int

    status = EngineStatus.IDLE


@dataclass(frozen=True)
class RunningState:
    """A phase is counting down.

    Elapsed time is ``accumulated_seconds + (now - reference_start)``.
    """

    session: SessionRecord
    total_seconds: int
    accumulated_seconds: float
    reference_start: datetime

    status = EngineStatus.RUNNING

    @property
    def phase(self) -> PhaseType:
        return self.session.phase_type

    def elapsed(self, now: datetime) -> float:
        delta = (now - self.reference_start).total_seconds()
        return self.accumulated_seconds + max(0.0, delta)


@dataclass(frozen=True)
class PausedState:
    """A phase is frozen; elapsed time is fully banked."""

    session: SessionRecord
    total_seconds: int
    accumulated_seconds: float

    status = EngineStatus.PAUSED

    @property
    def phase(self) -> PhaseType:
        return self.session.phase_type

    def elapsed(self, now: datetime) -> float:
        return self.accumulated_seconds


EngineState = IdleState | RunningState | PausedState


@dataclass(frozen=True)
class EngineSnapshot:
    """Observable engine state pushed to listeners after each change."""

    status: EngineStatus
    current_phase: PhaseType
    time_remaining_seconds: float
    total_seconds: int
    progress_fraction: float
    current_session: SessionRecord | None
    completed_focus_count: int = 0

    @property
    def is_running(self) -> bool:
        # Paused still counts as running: a phase is in progress
        return self.status in (EngineStatus.RUNNING, EngineStatus.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.status is EngineStatus.PAUSED

    @property
    def is_idle(self) -> bool:
        return self.status is EngineStatus.IDLE

    @property
    def whole_seconds_remaining(self) -> int:
        """Remaining time rounded up, as shown on a countdown display."""
        remaining = self.time_remaining_seconds
        whole = int(remaining)
        return whole + 1 if remaining > whole else whole

    @property
    def time_string(self) -> str:
        seconds = self.whole_seconds_remaining
        return f"{seconds // 60:02d}:{seconds % 60:02d}"


def progress_for(remaining: float, total: int) -> float:
    """``1 - remaining/total`` clamped to [0, 1]."""
    if total <= 0:
        return 0.0
    return max(0.0, min(1.0, 1.0 - remaining / total))


def build_snapshot(
    state: EngineState, now: datetime, completed_focus_count: int = 0
) -> EngineSnapshot:
    """Project ``state`` at instant ``now`` into an observable snapshot."""
    if isinstance(state, IdleState):
        return EngineSnapshot(
            status=EngineStatus.IDLE,
            current_phase=state.phase,
            time_remaining_seconds=float(state.preview_seconds),
            total_seconds=state.preview_seconds,
            progress_fraction=0.0,
            current_session=None,
            completed_focus_count=completed_focus_count,
        )

    remaining = max(state.total_seconds - state.elapsed(now), 0.0)
    return EngineSnapshot(
        status=state.status,
        current_phase=state.phase,
        time_remaining_seconds=remaining,
        total_seconds=state.total_seconds,
        progress_fraction=progress_for(remaining, state.total_seconds),
        current_session=state.session,
        completed_focus_count=completed_focus_count,
    )
