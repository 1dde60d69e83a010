"""SQLite adapter module - Local database storage implementation."""

from focusflow.adapters.sqlite.connection import (
    DatabaseConnection,
    default_db_path,
    get_connection,
)
from focusflow.adapters.sqlite.session_repository import SqliteSessionRepository
from focusflow.adapters.sqlite.task_repository import SqliteTaskRepository

__all__ = [
    "DatabaseConnection",
    "SqliteSessionRepository",
    "SqliteTaskRepository",
    "default_db_path",
    "get_connection",
]
