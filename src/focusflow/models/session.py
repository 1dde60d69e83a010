"""Session record model.

A ``SessionRecord`` is the durable representation of one phase instance
(one focus block or one break). Records are immutable; every lifecycle step
produces a replacement via ``model_copy``.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PhaseType(str, Enum):
    """Kind of timed interval."""

    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def default_minutes(self) -> int:
        return _DEFAULT_MINUTES[self]

    @property
    def is_break(self) -> bool:
        return self is not PhaseType.FOCUS


_DISPLAY_NAMES = {
    PhaseType.FOCUS: "Focus",
    PhaseType.SHORT_BREAK: "Short Break",
    PhaseType.LONG_BREAK: "Long Break",
}

_DEFAULT_MINUTES = {
    PhaseType.FOCUS: 25,
    PhaseType.SHORT_BREAK: 5,
    PhaseType.LONG_BREAK: 15,
}


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class SessionRecord(BaseModel):
    """One phase instance.

    Attributes:
        id: Unique identifier, assigned at creation
        user_id: Owner key used by the session store
        phase_type: Focus, short break or long break
        start_time: When the phase began running
        end_time: When the phase was finalized; None while in progress
        duration_minutes: Configured length, resolved once at creation
        completed: True once the phase elapsed or was finalized
        skipped: True when the phase was finalized by skip()
        task_id: Optional reference to an external task
        created_at: Creation timestamp
        updated_at: Last lifecycle change (pause, resume, finalize)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    phase_type: PhaseType
    start_time: datetime
    end_time: datetime | None = None
    duration_minutes: int = Field(gt=0)
    completed: bool = False
    skipped: bool = False
    task_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        *,
        user_id: str,
        phase_type: PhaseType,
        duration_minutes: int,
        now: datetime | None = None,
        task_id: str | None = None,
    ) -> SessionRecord:
        """Create a new in-progress record starting at ``now``."""
        now = now or utc_now()
        return cls(
            user_id=user_id,
            phase_type=phase_type,
            start_time=now,
            duration_minutes=duration_minutes,
            task_id=task_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_in_progress(self) -> bool:
        return not self.completed and self.end_time is None

    @property
    def total_seconds(self) -> int:
        return self.duration_minutes * 60

    def touched(self, now: datetime) -> SessionRecord:
        """Return a copy with only ``updated_at`` moved forward."""
        return self.model_copy(update={"updated_at": now})

    def finalized(self, now: datetime, *, skipped: bool = False) -> SessionRecord:
        """Return the completed copy of this record."""
        return self.model_copy(
            update={
                "end_time": now,
                "completed": True,
                "skipped": skipped,
                "updated_at": now,
            }
        )
