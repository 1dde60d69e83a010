"""Repository interfaces for FocusFlow.

This package contains abstract base classes (ABCs) that define the contracts
for data persistence operations. These are the "Ports" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- focusflow.adapters.sqlite (local storage)
- focusflow.adapters.memory (in-process storage)
"""

from .repository import SessionRepository, TaskRepository

__all__ = [
    "SessionRepository",
    "TaskRepository",
]
