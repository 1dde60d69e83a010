"""SQLite implementation of SessionRepository."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from focusflow.adapters.sqlite.connection import get_connection
from focusflow.adapters.sqlite.utils import parse_datetime, row_to_dict, to_iso
from focusflow.models import PhaseType, SessionRecord
from focusflow.repositories import SessionRepository


class SqliteSessionRepository(SessionRepository):
    """SQLite implementation of the session store.

    Calls may arrive from the engine's persistence thread and the CLI thread;
    statements on the shared connection are serialized with a lock.
    """

    def __init__(self, db_path: str | Path | None = None):
        """Initialize SQLite session repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    async def create_or_update(self, record: SessionRecord) -> SessionRecord:
        """Upsert a record by id."""
        with self._lock:
            self.connection.execute(
                """INSERT INTO sessions (
                    id, user_id, phase_type, start_time, end_time, duration_minutes,
                    completed, skipped, task_id, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    user_id = excluded.user_id,
                    phase_type = excluded.phase_type,
                    start_time = excluded.start_time,
                    end_time = excluded.end_time,
                    duration_minutes = excluded.duration_minutes,
                    completed = excluded.completed,
                    skipped = excluded.skipped,
                    task_id = excluded.task_id,
                    updated_at = excluded.updated_at""",
                (
                    record.id,
                    record.user_id,
                    record.phase_type.value,
                    to_iso(record.start_time),
                    to_iso(record.end_time),
                    record.duration_minutes,
                    record.completed,
                    record.skipped,
                    record.task_id,
                    to_iso(record.created_at),
                    to_iso(record.updated_at),
                ),
            )
            self.connection.commit()
        return record

    async def delete(self, record_id: str) -> bool:
        """Delete a record by id."""
        with self._lock:
            cursor = self.connection.execute(
                "DELETE FROM sessions WHERE id = ?", (record_id,)
            )
            self.connection.commit()
        return cursor.rowcount > 0

    async def load_most_recent_incomplete(self, user_id: str) -> SessionRecord | None:
        """Return the newest record for ``user_id`` if it is still in progress."""
        with self._lock:
            row = self.connection.execute(
                """SELECT * FROM sessions WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC LIMIT 1""",
                (user_id,),
            ).fetchone()

        if row is None:
            return None

        record = self._row_to_record(row)
        return record if record.is_in_progress else None

    async def list_sessions(
        self,
        user_id: str,
        since: datetime | None = None,
        limit: int | None = None,
    ) -> list[SessionRecord]:
        """List records newest first."""
        query = "SELECT * FROM sessions WHERE user_id = ?"
        params: list[Any] = [user_id]

        if since is not None:
            query += " AND start_time >= ?"
            params.append(to_iso(since))

        query += " ORDER BY start_time DESC, rowid DESC"

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._lock:
            rows = self.connection.execute(query, params).fetchall()

        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> SessionRecord:
        data = row_to_dict(row)
        data["phase_type"] = PhaseType(data["phase_type"])
        data["completed"] = bool(data["completed"])
        data["skipped"] = bool(data["skipped"])
        for key in ("start_time", "end_time", "created_at", "updated_at"):
            data[key] = parse_datetime(data[key])
        return SessionRecord(**data)
