"""Tests for side-effect port implementations."""

import time
from io import StringIO
from unittest.mock import patch

from rich.console import Console

from focusflow.models import PhaseType
from focusflow.services.side_effects import (
    ConsoleNotifier,
    NoOpHaptics,
    NoOpLiveStatus,
    NoOpNotifications,
    RecordingLiveStatus,
)


def test_noops_accept_every_call():
    NoOpLiveStatus().on_phase_start(PhaseType.FOCUS, 1500.0)
    NoOpLiveStatus().on_tick(PhaseType.FOCUS, 10.0, 0.5, True)
    NoOpLiveStatus().on_phase_end()
    for name in ("timer_start", "timer_pause", "timer_complete", "phase_transition", "impact"):
        getattr(NoOpHaptics(), name)()
    NoOpNotifications().schedule_completion("t", "b", 1.0)
    NoOpNotifications().cancel_completion()


class TestRecordingLiveStatus:
    def test_tracks_latest_payload(self):
        live = RecordingLiveStatus()
        assert not live.active

        live.on_phase_start(PhaseType.LONG_BREAK, 900.0)
        assert live.active
        assert live.current.remaining_seconds == 900.0

        live.on_tick(PhaseType.LONG_BREAK, 450.0, 0.5, False)
        assert live.current.progress == 0.5
        assert live.current.is_running is False

        live.on_phase_end()
        assert live.current is None
        assert (live.phases_started, live.phases_ended) == (1, 1)


class TestConsoleNotifier:
    def _notifier(self, sound=False):
        console = Console(file=StringIO(), width=80)
        return ConsoleNotifier(console, sound=sound), console

    def test_schedule_and_cancel(self):
        notifier, _ = self._notifier()

        notifier.schedule_completion("Focus Session", "Focus session completed!", 60)
        assert notifier.pending

        notifier.cancel_completion()
        assert not notifier.pending

    def test_reschedule_replaces_pending_timer(self):
        notifier, _ = self._notifier()
        notifier.schedule_completion("a", "b", 60)
        first = notifier._timer

        notifier.schedule_completion("a", "b", 30)

        assert notifier._timer is not first
        assert first.finished.is_set()
        notifier.cancel_completion()

    def test_delivery_prints_and_rings(self):
        notifier, console = self._notifier(sound=True)

        with patch.object(console, "bell") as bell:
            notifier._deliver("Focus Session", "Focus session completed!")

        bell.assert_called_once()
        assert "Focus session completed!" in console.file.getvalue()
        assert not notifier.pending

    def test_delivery_after_delay(self):
        notifier, console = self._notifier()
        notifier.schedule_completion("Focus Session", "Short Break session completed!", 0)

        deadline = time.monotonic() + 2
        while "completed!" not in console.file.getvalue() and time.monotonic() < deadline:
            time.sleep(0.01)

        assert "Short Break session completed!" in console.file.getvalue()
