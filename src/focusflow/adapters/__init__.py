"""Adapters module - Repository implementations for different storage backends.

This package contains concrete implementations (adapters) for the repository interfaces:
- sqlite: Local SQLite database storage
- memory: In-process storage for ephemeral runs and tests
"""

from .memory import InMemorySessionRepository, InMemoryTaskRepository
from .sqlite import SqliteSessionRepository, SqliteTaskRepository

__all__ = [
    "InMemorySessionRepository",
    "InMemoryTaskRepository",
    "SqliteSessionRepository",
    "SqliteTaskRepository",
]
