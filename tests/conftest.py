"""Shared test fixtures and configuration.

Provides a controllable wall clock, deterministic tick sources, in-memory
stores and a config service isolated in a temporary directory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from focusflow.adapters.memory import InMemorySessionRepository, InMemoryTaskRepository
from focusflow.services.timer_service import SessionTimerEngine
from focusflow.utils.background import AsyncRunner
from focusflow.utils.ticks import ManualTickSource

USER_ID = "user-001"


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class TickFactory:
    """Builds ManualTickSources and remembers them."""

    def __init__(self):
        self.sources: list[ManualTickSource] = []

    def __call__(self) -> ManualTickSource:
        source = ManualTickSource()
        self.sources.append(source)
        return source

    @property
    def current(self) -> ManualTickSource | None:
        active = [s for s in self.sources if s.is_active]
        return active[-1] if active else None

    def fire(self) -> bool:
        source = self.current
        return source.fire() if source is not None else False


@pytest.fixture()
def clock():
    """Fake clock starting Monday 2026-03-02 09:00 UTC."""
    return FakeClock(datetime(2026, 3, 2, 9, 0, tzinfo=UTC))


@pytest.fixture()
def ticks():
    return TickFactory()


@pytest.fixture()
def store():
    return InMemorySessionRepository()


@pytest.fixture()
def task_store():
    return InMemoryTaskRepository()


@pytest.fixture()
def runner():
    r = AsyncRunner(name="test-store")
    yield r
    r.stop()


@pytest.fixture()
def make_engine(store, clock, ticks, runner):
    """Factory for engines wired to the shared fake clock and stores."""
    engines = []

    def _make(settings=None, **kwargs) -> SessionTimerEngine:
        kwargs.setdefault("user_id", USER_ID)
        kwargs.setdefault("tick_source_factory", ticks)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("runner", runner)
        engine = SessionTimerEngine(kwargs.pop("store", store), settings, **kwargs)
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.close()


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from focusflow.services.config_service import get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("focusflow.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("focusflow.services.config_service.user_data_dir", return_value=tmpdir):
            from focusflow.services.config_service import ConfigService

            svc = ConfigService()
            yield svc
    get_config_service.cache_clear()


@pytest.fixture()
def cli_env(tmp_config):
    """Point every command at ``tmp_config`` and keep logs out of the user dir."""
    from focusflow.adapters.sqlite import DatabaseConnection

    with patch("focusflow.commands.utils.get_config_service", return_value=tmp_config):
        with patch("focusflow.main.get_logger"):
            yield tmp_config
    DatabaseConnection.close_connection(tmp_config.db_path)
