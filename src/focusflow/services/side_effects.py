"""Side-effect ports driven by the timer engine.

The engine pushes to these collaborators but never depends on them: every
call is made after the engine lock is released and failures are logged.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from rich.console import Console

from focusflow.models import PhaseType
from focusflow.utils.ui.console import get_console

logger = logging.getLogger("focusflow.side_effects")


class LiveStatusPort(ABC):
    """A glanceable status surface (lock screen, menu bar, terminal title)."""

    @abstractmethod
    def on_phase_start(self, phase: PhaseType, total_seconds: float) -> None:
        """A phase started running from the beginning."""

    @abstractmethod
    def on_tick(
        self,
        phase: PhaseType,
        remaining_seconds: float,
        progress: float,
        is_running: bool,
    ) -> None:
        """Remaining time changed; ``is_running`` is False while paused."""

    @abstractmethod
    def on_phase_end(self) -> None:
        """The phase completed or was discarded."""


class HapticPort(ABC):
    """Tactile feedback hooks, gated by the ``haptic_feedback`` setting."""

    @abstractmethod
    def timer_start(self) -> None: ...

    @abstractmethod
    def timer_pause(self) -> None: ...

    @abstractmethod
    def timer_complete(self) -> None: ...

    @abstractmethod
    def phase_transition(self) -> None: ...

    @abstractmethod
    def impact(self) -> None: ...


class NotificationPort(ABC):
    """Schedules the "phase finished" notification."""

    @abstractmethod
    def schedule_completion(self, title: str, body: str, seconds: float) -> None:
        """Deliver a notification ``seconds`` from now, replacing any pending one."""

    @abstractmethod
    def cancel_completion(self) -> None:
        """Drop the pending notification, if any."""


class NoOpLiveStatus(LiveStatusPort):
    def on_phase_start(self, phase: PhaseType, total_seconds: float) -> None:
        pass

    def on_tick(self, phase, remaining_seconds, progress, is_running) -> None:
        pass

    def on_phase_end(self) -> None:
        pass


class NoOpHaptics(HapticPort):
    def timer_start(self) -> None:
        pass

    def timer_pause(self) -> None:
        pass

    def timer_complete(self) -> None:
        pass

    def phase_transition(self) -> None:
        pass

    def impact(self) -> None:
        pass


class NoOpNotifications(NotificationPort):
    def schedule_completion(self, title: str, body: str, seconds: float) -> None:
        pass

    def cancel_completion(self) -> None:
        pass


@dataclass(frozen=True)
class LiveStatusPayload:
    """Latest values pushed to a live-status surface."""

    phase: PhaseType
    remaining_seconds: float
    progress: float
    is_running: bool


class RecordingLiveStatus(LiveStatusPort):
    """Keeps the most recent live-status payload for the terminal display."""

    def __init__(self):
        self.current: LiveStatusPayload | None = None
        self.phases_started = 0
        self.phases_ended = 0

    @property
    def active(self) -> bool:
        return self.current is not None

    def on_phase_start(self, phase: PhaseType, total_seconds: float) -> None:
        self.phases_started += 1
        self.current = LiveStatusPayload(phase, total_seconds, 0.0, True)

    def on_tick(self, phase, remaining_seconds, progress, is_running) -> None:
        self.current = LiveStatusPayload(phase, remaining_seconds, progress, is_running)

    def on_phase_end(self) -> None:
        self.phases_ended += 1
        self.current = None


class ConsoleNotifier(NotificationPort):
    """Terminal notifications: rings the bell and prints when a phase is due."""

    def __init__(self, console: Console | None = None, sound: bool = True):
        self.console = console or get_console()
        self.sound = sound
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule_completion(self, title: str, body: str, seconds: float) -> None:
        timer = threading.Timer(max(0.0, seconds), self._deliver, args=(title, body))
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        timer.start()
        logger.debug("Completion notification due in %.0fs", seconds)

    def cancel_completion(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _deliver(self, title: str, body: str) -> None:
        with self._lock:
            self._timer = None
        if self.sound:
            self.console.bell()
        self.console.print(f"[bold green]{title}[/bold green] {body}")
