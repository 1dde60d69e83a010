"""Periodic tick sources for the timer engine.

Ticks only prompt the engine to recompute remaining time from the wall clock;
they carry no time themselves, so a late or missed tick never skews the
countdown.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

logger = logging.getLogger("focusflow.ticks")

TickCallback = Callable[[], None]


class TickSource(ABC):
    """A cancellable periodic callback."""

    @abstractmethod
    def start(self, on_tick: TickCallback) -> None:
        """Begin invoking ``on_tick`` periodically."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop ticking. Idempotent and safe before ``start``."""

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True between ``start`` and ``cancel``."""


class ThreadTickSource(TickSource):
    """Ticks from a daemon thread against ``time.monotonic`` deadlines.

    Deadlines advance by ``interval`` from the start instant, so sleeps never
    accumulate drift. When the thread wakes more than ``tolerance`` seconds
    after a deadline (for example after a system suspend) the missed ticks are
    dropped and the schedule restarts from now.
    """

    def __init__(self, interval: float = 1.0, tolerance: float = 0.1):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.tolerance = tolerance
        self._stop = threading.Event()
        self._fire_lock = threading.RLock()
        self._active = False
        self._thread: Optional[threading.Thread] = None
        self._on_tick: Optional[TickCallback] = None

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self, on_tick: TickCallback) -> None:
        if self._thread is not None:
            raise RuntimeError("tick source already started")
        self._on_tick = on_tick
        self._active = True
        self._thread = threading.Thread(target=self._run, daemon=True, name="focusflow-ticks")
        self._thread.start()

    def cancel(self) -> None:
        self._active = False
        self._stop.set()
        # Waits for an in-flight callback unless called from inside it.
        with self._fire_lock:
            pass

    def _run(self) -> None:
        deadline = time.monotonic() + self.interval
        while not self._stop.wait(max(0.0, deadline - time.monotonic())):
            now = time.monotonic()
            if now - deadline > self.tolerance:
                logger.debug("Tick late by %.2fs; rescheduling", now - deadline)
                deadline = now
            deadline += self.interval

            with self._fire_lock:
                if not self._active:
                    return
                try:
                    self._on_tick()
                except Exception:
                    logger.exception("Tick callback failed")


class ManualTickSource(TickSource):
    """Tick source fired explicitly by the caller.

    Attributes:
        starts: Number of times ``start`` was called
        cancels: Number of times ``cancel`` was called
    """

    def __init__(self):
        self._on_tick: Optional[TickCallback] = None
        self._active = False
        self.starts = 0
        self.cancels = 0

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self, on_tick: TickCallback) -> None:
        self._on_tick = on_tick
        self._active = True
        self.starts += 1

    def cancel(self) -> None:
        self._active = False
        self.cancels += 1

    def fire(self) -> bool:
        """Invoke the callback once if active; returns whether it ran."""
        if not self._active or self._on_tick is None:
            return False
        self._on_tick()
        return True
