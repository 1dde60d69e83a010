"""Database connection management for the local session store.

One connection is kept per database path, configured for WAL mode and
migrated to the current schema on first use.
"""

from __future__ import annotations

import atexit
import logging
import os
import sqlite3
import threading
from pathlib import Path

from platformdirs import user_data_dir

from focusflow.adapters.sqlite.migrations import ALL_MIGRATIONS, MigrationRunner

logger = logging.getLogger("focusflow.storage")

APP_NAME = "focusflow"
DB_FILENAME = "sessions.db"


def default_db_path() -> Path:
    """Location of the session database in the user data directory."""
    return Path(user_data_dir(APP_NAME)) / DB_FILENAME


class DatabaseConnection:
    """Connection registry for the local SQLite store.

    Provides:
    - One shared connection per database file
    - WAL mode and foreign key enforcement
    - Automatic directory creation
    - Owner-only file permissions on new databases
    - Cleanup on interpreter exit
    """

    _connections: dict[Path, sqlite3.Connection] = {}
    _lock = threading.Lock()
    _atexit_registered = False

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create the connection for ``db_path``.

        Args:
            db_path: Path to database file. If None, uses default location.

        Returns:
            sqlite3.Connection configured for session storage
        """
        path = Path(db_path) if db_path is not None else default_db_path()

        with cls._lock:
            connection = cls._connections.get(path)
            if connection is not None:
                return connection

            path.parent.mkdir(parents=True, exist_ok=True)
            is_new_database = not path.exists()

            connection = sqlite3.connect(
                str(path),
                check_same_thread=False,  # engine persists from a background thread
                timeout=30.0,
            )
            connection.row_factory = sqlite3.Row
            connection.execute("PRAGMA foreign_keys = ON")
            connection.execute("PRAGMA journal_mode = WAL")

            if is_new_database:
                os.chmod(path, 0o600)
                logger.info("Created session database at %s", path)

            MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)

            cls._connections[path] = connection
            if not cls._atexit_registered:
                atexit.register(cls.close_all)
                cls._atexit_registered = True

            return connection

    @classmethod
    def close_connection(cls, db_path: str | Path | None = None) -> None:
        """Close the connection for one database path, if open."""
        path = Path(db_path) if db_path is not None else default_db_path()
        with cls._lock:
            connection = cls._connections.pop(path, None)
        if connection is not None:
            connection.commit()
            connection.close()

    @classmethod
    def close_all(cls) -> None:
        """Close every open connection."""
        with cls._lock:
            connections = list(cls._connections.values())
            cls._connections.clear()
        for connection in connections:
            try:
                connection.commit()
                connection.close()
            except sqlite3.Error as e:
                logger.warning("Error closing database connection: %s", e)


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get database connection.

    Args:
        db_path: Optional path to database file

    Returns:
        Configured sqlite3.Connection
    """
    return DatabaseConnection.get_connection(db_path)
