"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any

from focusflow.adapters.sqlite.connection import get_connection
from focusflow.adapters.sqlite.utils import (
    generate_uuid,
    now_iso,
    parse_datetime,
    row_to_dict,
)
from focusflow.exceptions import NotFoundError
from focusflow.models import Task, TaskCreate, TaskFilters
from focusflow.repositories import TaskRepository


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task."""
        task_id = generate_uuid()
        now = now_iso()

        with self._lock:
            self.connection.execute(
                """INSERT INTO tasks (
                    id, title, notes, is_completed, estimated_pomodoros,
                    completed_pomodoros, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    task_id,
                    task_data.title,
                    task_data.notes,
                    False,
                    task_data.estimated_pomodoros,
                    0,
                    now,
                    now,
                ),
            )
            self.connection.commit()

        return await self.get(task_id)

    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        with self._lock:
            row = self.connection.execute(
                "SELECT * FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()

        if not row:
            raise NotFoundError(f"Task not found: {task_id}")

        return self._row_to_task(row)

    async def list_all(self, filters: TaskFilters) -> list[Task]:
        """List tasks, oldest first."""
        query = "SELECT * FROM tasks"
        params: list[Any] = []

        if not filters.include_completed:
            query += " WHERE is_completed = 0"

        query += " ORDER BY created_at ASC"

        if filters.limit is not None:
            query += " LIMIT ?"
            params.append(filters.limit)

        with self._lock:
            rows = self.connection.execute(query, params).fetchall()

        return [self._row_to_task(row) for row in rows]

    async def increment_pomodoros(self, task_id: str) -> Task:
        """Credit one completed focus phase to a task."""
        with self._lock:
            cursor = self.connection.execute(
                """UPDATE tasks
                SET completed_pomodoros = completed_pomodoros + 1, updated_at = ?
                WHERE id = ?""",
                (now_iso(), task_id),
            )
            self.connection.commit()

        if cursor.rowcount == 0:
            raise NotFoundError(f"Task not found: {task_id}")

        return await self.get(task_id)

    async def set_completed(self, task_id: str, completed: bool) -> Task:
        """Mark a task as completed, or reopen it."""
        with self._lock:
            cursor = self.connection.execute(
                "UPDATE tasks SET is_completed = ?, updated_at = ? WHERE id = ?",
                (completed, now_iso(), task_id),
            )
            self.connection.commit()

        if cursor.rowcount == 0:
            raise NotFoundError(f"Task not found: {task_id}")

        return await self.get(task_id)

    async def delete(self, task_id: str) -> bool:
        """Delete a task; linked sessions keep its id."""
        with self._lock:
            cursor = self.connection.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            self.connection.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        data = row_to_dict(row)
        data["is_completed"] = bool(data["is_completed"])
        data["created_at"] = parse_datetime(data["created_at"])
        data["updated_at"] = parse_datetime(data["updated_at"])
        return Task(**data)
