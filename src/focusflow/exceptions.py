"""Custom exceptions for FocusFlow."""

from __future__ import annotations


class FocusFlowError(Exception):
    """Base exception for all FocusFlow errors."""


class PersistenceError(FocusFlowError):
    """Raised (or reported) when the session store rejects a read or write.

    The engine never raises this past a command; it is delivered on the
    engine's error channel instead.
    """

    def __init__(
        self,
        operation: str,
        record_id: str | None = None,
        cause: BaseException | None = None,
    ):
        self.operation = operation
        self.record_id = record_id
        self.cause = cause
        detail = f"{operation} failed"
        if record_id:
            detail += f" for session {record_id}"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)


class ConfigError(FocusFlowError):
    """Raised when settings are invalid or the config file cannot be written."""


class NotFoundError(FocusFlowError):
    """Raised when a task or session does not exist."""
