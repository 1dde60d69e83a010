"""Configuration service for managing FocusFlow configuration.

This module provides the ConfigService class, which is the single source of truth
for all configuration management in FocusFlow. It handles:

- Loading and saving config.json
- Timer settings updates, with change notification for the running engine
- Dot-key access used by ``focusflow config get/set``
- Config file initialization with sensible defaults
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from focusflow.exceptions import ConfigError
from focusflow.models.config_models import AppConfig, StorageConfig, TimerSettings

logger = logging.getLogger("focusflow.config")

SettingsListener = Callable[[TimerSettings], None]


class ConfigService:
    """Service for managing application configuration.

    Settings changes made through ``update_settings`` (or ``set`` on a
    ``timer.*`` key) are pushed to subscribers, which is how an idle engine
    refreshes its preview duration.
    """

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("focusflow"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("focusflow"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._listeners: list[SettingsListener] = []
        self._lock = threading.Lock()

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def settings(self) -> TimerSettings:
        """Current timer settings snapshot."""
        return self.config.timer

    @property
    def user_id(self) -> str:
        return self.config.user_id

    @property
    def db_path(self) -> Path:
        """Session database location, honouring ``storage.db_path``."""
        if self.config.storage.db_path:
            return Path(self.config.storage.db_path).expanduser()
        return self.data_dir / "sessions.db"

    def load_config(self) -> AppConfig:
        """Load configuration from storage.

        A missing file is created with defaults. A malformed file is logged
        and only its invalid sections fall back to defaults; the stored user
        id survives so existing sessions stay reachable. The file is left on
        disk untouched until the next save.
        """
        if self._config is not None:
            return self._config  # Return cached config if already loaded

        try:
            with open(self.config_path, encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
            return self._config
        except OSError as e:
            logger.warning("Cannot read config %s: %s", self.config_path, e)
            self._config = AppConfig()
            return self._config

        try:
            self._config = AppConfig.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring malformed config %s: %s", self.config_path, e)
            self._config = _salvage(raw)

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))

            # Set file permissions
            self.config_path.chmod(0o600)
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}") from e

    def reset_config(self) -> None:
        """Reset configuration to defaults, keeping the local user id."""
        user_id = self.config.user_id
        self._config = AppConfig(user_id=user_id)
        self.save_config()
        self._notify()

    def update_settings(self, **changes: Any) -> TimerSettings:
        """Validate and apply timer setting changes, then notify subscribers.

        Raises:
            ConfigError: If a key is unknown or a value fails validation
        """
        unknown = set(changes) - set(TimerSettings.model_fields)
        if unknown:
            raise ConfigError(f"Unknown timer setting(s): {', '.join(sorted(unknown))}")

        merged = {**self.config.timer.model_dump(), **changes}
        try:
            settings = TimerSettings.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid timer settings: {e}") from e

        self._config = self.config.model_copy(update={"timer": settings})
        self.save_config()
        logger.info("Timer settings updated: %s", ", ".join(sorted(changes)))
        self._notify()
        return settings

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a settings listener; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def get(self, key: str) -> Any:
        """Read a dot-separated key such as ``timer.focus_minutes``.

        Raises:
            KeyError: If the key does not exist
        """
        value: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                raise KeyError(key)
            value = value[part]
        return value

    def set(self, key: str, value: Any) -> None:
        """Write a dot-separated key.

        String values from the command line are coerced by pydantic.

        Raises:
            KeyError: If the key does not exist
            ConfigError: If the value fails validation
        """
        section, _, field = key.partition(".")
        if section == "timer" and field:
            if field not in TimerSettings.model_fields:
                raise KeyError(key)
            self.update_settings(**{field: value})
            return

        self.get(key)  # raises KeyError for unknown keys
        data = self.config.model_dump()
        target = data
        parts = key.split(".")
        for part in parts[:-1]:
            target = target[part]
        target[parts[-1]] = value
        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {key}: {e}") from e
        self.save_config()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        settings = self.config.timer
        for listener in listeners:
            try:
                listener(settings)
            except Exception:
                logger.exception("Settings listener failed")


_SECTIONS = {"timer": TimerSettings, "storage": StorageConfig}


def _salvage(raw: str) -> AppConfig:
    """Rebuild a config from a malformed file, keeping the user id and valid sections."""
    try:
        data = json.loads(raw)
    except ValueError:
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    kept: dict[str, Any] = {}
    user_id = data.get("user_id")
    if isinstance(user_id, str) and user_id:
        kept["user_id"] = user_id
    for name, model in _SECTIONS.items():
        if name not in data:
            continue
        try:
            kept[name] = model.model_validate(data[name])
        except ValidationError:
            logger.warning("Resetting config section %r to defaults", name)
    return AppConfig(**kept)


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
