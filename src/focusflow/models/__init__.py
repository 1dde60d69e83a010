"""FocusFlow domain models.

This package contains the Pydantic models and plain dataclasses that
represent sessions, tasks, configuration and timer state.
"""

from .config_models import AppConfig, StorageConfig, TimerSettings
from .session import PhaseType, SessionRecord, utc_now
from .task import Task, TaskCreate, TaskFilters

__all__ = [
    # Session models
    "PhaseType",
    "SessionRecord",
    "utc_now",
    # Task models
    "Task",
    "TaskCreate",
    "TaskFilters",
    # Config models
    "AppConfig",
    "StorageConfig",
    "TimerSettings",
]
