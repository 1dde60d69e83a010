"""Services module for FocusFlow - Business logic layer."""

from .config_service import ConfigService, get_config_service
from .stats_service import StatsService
from .task_service import TaskService
from .timer_service import COMPLETION_EPSILON, RecoveryOutcome, SessionTimerEngine

__all__ = [
    "COMPLETION_EPSILON",
    "ConfigService",
    "RecoveryOutcome",
    "SessionTimerEngine",
    "StatsService",
    "TaskService",
    "get_config_service",
]
