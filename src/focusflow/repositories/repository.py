"""Repository abstraction layer for FocusFlow.

This module defines the abstract base classes (interfaces) for the stores the
timer engine talks to, following the hexagonal architecture (Ports & Adapters)
pattern.

Repositories provide an abstraction over data persistence, allowing the timer
logic to remain independent of the underlying storage mechanism (local SQLite,
in-memory, a remote document store, etc.).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from focusflow.models import SessionRecord, Task, TaskCreate, TaskFilters


class SessionRepository(ABC):
    """Abstract base class for session record persistence.

    Records are keyed by ``id`` and partitioned by ``user_id``. Adapters must
    store records as given and never alter them.
    """

    @abstractmethod
    async def create_or_update(self, record: SessionRecord) -> SessionRecord:
        """Upsert a record by id.

        Args:
            record: The record to store

        Returns:
            The stored record

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "SessionRepository.create_or_update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Delete a record.

        Only used for discarded (reset, never completed) records.

        Args:
            record_id: Unique identifier for the record

        Returns:
            True if a record was removed, False if it did not exist
        """
        raise NotImplementedError(
            "SessionRepository.delete() must be implemented by adapter"
        )

    @abstractmethod
    async def load_most_recent_incomplete(self, user_id: str) -> SessionRecord | None:
        """Return the newest record for ``user_id`` if it is still in progress.

        Only the most recently created record is considered; when it is
        completed, None is returned.

        Args:
            user_id: Owner key

        Returns:
            The in-progress record or None
        """
        raise NotImplementedError(
            "SessionRepository.load_most_recent_incomplete() must be implemented by adapter"
        )

    @abstractmethod
    async def list_sessions(
        self,
        user_id: str,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> list[SessionRecord]:
        """List records newest first.

        Args:
            user_id: Owner key
            since: Only records started at or after this instant
            limit: Maximum number of results

        Returns:
            List of SessionRecord objects
        """
        raise NotImplementedError(
            "SessionRepository.list_sessions() must be implemented by adapter"
        )


class TaskRepository(ABC):
    """Abstract base class for task persistence operations."""

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task.

        Args:
            task_data: TaskCreate object with task details

        Returns:
            Created Task object with generated ID and timestamps
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def list_all(self, filters: TaskFilters) -> list[Task]:
        """List tasks, oldest first."""
        raise NotImplementedError(
            "TaskRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def increment_pomodoros(self, task_id: str) -> Task:
        """Credit one completed focus phase to a task.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.increment_pomodoros() must be implemented by adapter"
        )

    @abstractmethod
    async def set_completed(self, task_id: str, completed: bool) -> Task:
        """Mark a task as completed, or reopen it.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.set_completed() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task.

        Sessions that referenced it keep the id.

        Returns:
            True if a task was deleted, False if none had that id
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )
