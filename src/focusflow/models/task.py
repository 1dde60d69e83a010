"""Task data models.

Tasks are owned elsewhere; sessions only hold a task id. The local task list
exists so a focus phase can be linked to something and credited when it
completes.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Task(BaseModel):
    """Task model."""

    id: str
    title: str
    notes: str = ""
    is_completed: bool = False
    estimated_pomodoros: int = Field(default=1, ge=0)
    completed_pomodoros: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime

    @property
    def remaining_pomodoros(self) -> int:
        return max(0, self.estimated_pomodoros - self.completed_pomodoros)


class TaskCreate(BaseModel):
    """Model for creating a new task."""

    title: str = Field(min_length=1)
    notes: str = ""
    estimated_pomodoros: int = Field(default=1, ge=0)


class TaskFilters(BaseModel):
    """Filters for listing tasks."""

    include_completed: bool = False
    limit: Optional[int] = None
