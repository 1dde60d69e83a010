"""Task service - Business logic for task operations.

This service layer sits between commands and repositories, providing
a clean API for the local task list that focus phases link to.
"""

from __future__ import annotations

from focusflow.models import Task, TaskCreate, TaskFilters
from focusflow.repositories import TaskRepository


class TaskService:
    """Service for task business logic."""

    def __init__(self, task_repository: TaskRepository):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
        """
        self.repository = task_repository

    async def list_tasks(
        self, *, include_completed: bool = False, limit: int | None = None
    ) -> list[Task]:
        """List tasks, oldest first.

        Args:
            include_completed: Also return completed tasks
            limit: Maximum number of results
        """
        filters = TaskFilters(include_completed=include_completed, limit=limit)
        return await self.repository.list_all(filters)

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If the task does not exist
        """
        return await self.repository.get(task_id)

    async def add_task(
        self, title: str, *, notes: str = "", estimated_pomodoros: int = 1
    ) -> Task:
        """Create a new task.

        Args:
            title: Task title (required)
            notes: Free-form notes
            estimated_pomodoros: Expected number of focus phases

        Returns:
            Created Task object
        """
        task_data = TaskCreate(
            title=title, notes=notes, estimated_pomodoros=estimated_pomodoros
        )
        return await self.repository.add(task_data)

    async def increment_pomodoros(self, task_id: str) -> Task:
        """Credit one completed focus phase to a task."""
        return await self.repository.increment_pomodoros(task_id)

    async def complete_task(self, task_id: str) -> Task:
        """Mark a task as completed; it drops out of the default listing."""
        return await self.repository.set_completed(task_id, True)

    async def reopen_task(self, task_id: str) -> Task:
        """Reopen a completed task."""
        return await self.repository.set_completed(task_id, False)

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task.

        Returns:
            True if the task existed
        """
        return await self.repository.delete(task_id)
