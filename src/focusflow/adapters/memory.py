"""In-memory repository adapters.

Used by ``timer run --ephemeral`` and throughout the test suite. Both stores
can be told to fail so callers can exercise their error paths.
"""

from __future__ import annotations

import threading
from datetime import datetime

from focusflow.exceptions import NotFoundError
from focusflow.models import SessionRecord, Task, TaskCreate, TaskFilters, utc_now
from focusflow.repositories import SessionRepository, TaskRepository


class InMemorySessionRepository(SessionRepository):
    """Session store backed by a dict.

    Attributes:
        records: Stored records by id
        fail_with: When set, every operation raises this exception
        writes: Ordered log of ("upsert" | "delete", record_id) calls
    """

    def __init__(self, records: list[SessionRecord] | None = None):
        self.records: dict[str, SessionRecord] = {r.id: r for r in records or []}
        self.fail_with: Exception | None = None
        self.writes: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def create_or_update(self, record: SessionRecord) -> SessionRecord:
        self._check()
        with self._lock:
            self.records[record.id] = record
            self.writes.append(("upsert", record.id))
        return record

    async def delete(self, record_id: str) -> bool:
        self._check()
        with self._lock:
            self.writes.append(("delete", record_id))
            return self.records.pop(record_id, None) is not None

    async def load_most_recent_incomplete(self, user_id: str) -> SessionRecord | None:
        self._check()
        with self._lock:
            owned = [r for r in self.records.values() if r.user_id == user_id]
        if not owned:
            return None
        # Ties go to the record stored last
        newest = max(reversed(owned), key=lambda r: r.created_at)
        return newest if newest.is_in_progress else None

    async def list_sessions(
        self,
        user_id: str,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> list[SessionRecord]:
        self._check()
        with self._lock:
            owned = [
                r
                for r in self.records.values()
                if r.user_id == user_id and (since is None or r.start_time >= since)
            ]
        owned.reverse()
        owned.sort(key=lambda r: r.start_time, reverse=True)
        return owned[:limit] if limit is not None else owned


class InMemoryTaskRepository(TaskRepository):
    """Task store backed by a dict."""

    def __init__(self):
        self.tasks: dict[str, Task] = {}
        self.fail_with: Exception | None = None
        self._counter = 0

    async def add(self, task_data: TaskCreate) -> Task:
        if self.fail_with is not None:
            raise self.fail_with
        self._counter += 1
        now = utc_now()
        task = Task(
            id=f"task-{self._counter}",
            title=task_data.title,
            notes=task_data.notes,
            estimated_pomodoros=task_data.estimated_pomodoros,
            created_at=now,
            updated_at=now,
        )
        self.tasks[task.id] = task
        return task

    async def get(self, task_id: str) -> Task:
        if self.fail_with is not None:
            raise self.fail_with
        try:
            return self.tasks[task_id]
        except KeyError:
            raise NotFoundError(f"Task not found: {task_id}") from None

    async def list_all(self, filters: TaskFilters) -> list[Task]:
        tasks = sorted(self.tasks.values(), key=lambda t: t.created_at)
        if not filters.include_completed:
            tasks = [t for t in tasks if not t.is_completed]
        return tasks[: filters.limit] if filters.limit is not None else tasks

    async def increment_pomodoros(self, task_id: str) -> Task:
        task = await self.get(task_id)
        updated = task.model_copy(
            update={
                "completed_pomodoros": task.completed_pomodoros + 1,
                "updated_at": utc_now(),
            }
        )
        self.tasks[task_id] = updated
        return updated

    async def set_completed(self, task_id: str, completed: bool) -> Task:
        task = await self.get(task_id)
        updated = task.model_copy(update={"is_completed": completed, "updated_at": utc_now()})
        self.tasks[task_id] = updated
        return updated

    async def delete(self, task_id: str) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        return self.tasks.pop(task_id, None) is not None
