"""Database schema definitions for the local session store.

Timestamps are stored as ISO 8601 strings in UTC so lexical ordering matches
chronological ordering.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

# Session records - one row per phase instance
CREATE_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    phase_type TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT,
    duration_minutes INTEGER NOT NULL,
    completed BOOLEAN NOT NULL DEFAULT 0,
    skipped BOOLEAN NOT NULL DEFAULT 0,
    task_id TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

# Local task list used for linking focus phases
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    notes TEXT NOT NULL DEFAULT '',
    is_completed BOOLEAN NOT NULL DEFAULT 0,
    estimated_pomodoros INTEGER NOT NULL DEFAULT 1,
    completed_pomodoros INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

ALL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_sessions_user_created ON sessions(user_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_user_start ON sessions(user_id, start_time)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_task ON sessions(task_id)",
]
