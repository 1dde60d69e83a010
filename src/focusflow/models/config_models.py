"""Configuration models.

Durations are stored exactly as the user entered them; clamping to sane
bounds happens when a phase starts (see ``models.focus.durations``).
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, field_validator


class TimerSettings(BaseModel):
    """Pomodoro durations and behaviour toggles."""

    focus_minutes: int = Field(default=25)
    short_break_minutes: int = Field(default=5)
    long_break_minutes: int = Field(default=15)
    long_break_interval: int = Field(default=4, description="Focus phases per cycle")

    auto_start_break: bool = Field(default=False)
    auto_start_next_focus: bool = Field(default=False)

    daily_goal: int = Field(default=8, ge=1)
    haptic_feedback: bool = Field(default=True)
    sound_effects: bool = Field(default=True)


class StorageConfig(BaseModel):
    """Session store configuration."""

    db_path: str | None = Field(
        default=None, description="SQLite file; defaults to the user data dir"
    )

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class AppConfig(BaseModel):
    """Main FocusFlow configuration."""

    user_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Local user key for stored sessions",
    )
    timer: TimerSettings = Field(default_factory=TimerSettings)
    storage: StorageConfig = Field(default_factory=StorageConfig)
