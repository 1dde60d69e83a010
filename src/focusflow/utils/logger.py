"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir
from rich.logging import RichHandler

from focusflow.utils.ui.console import get_error_console

_APP_NAME = "focusflow"
_LOG_FILE = "focusflow.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def get_logger(verbose: bool = False) -> logging.Logger:
    """Return the application logger, initialising it on first call.

    Every module logs to a child of ``focusflow`` (``focusflow.engine``,
    ``focusflow.storage`` ...), so configuring this one logger covers them all.
    With ``verbose`` warnings and errors are also echoed to stderr.
    """
    global _logger
    if _logger is not None:
        if verbose:
            _attach_stderr(_logger)
        return _logger

    log_dir = Path(user_log_dir(_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_dir / _LOG_FILE,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        logger.addHandler(handler)
    logger.propagate = False

    if verbose:
        _attach_stderr(logger)

    _logger = logger
    return _logger


def _attach_stderr(logger: logging.Logger) -> None:
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    console_handler = RichHandler(console=get_error_console(), show_path=False)
    console_handler.setLevel(logging.WARNING)
    logger.addHandler(console_handler)
