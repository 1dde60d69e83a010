"""Tests for the full-screen timer display."""

from datetime import UTC, datetime
from io import StringIO
from unittest.mock import MagicMock, patch

from rich.console import Console

from focusflow.models import PhaseType, SessionRecord
from focusflow.models.focus.analytics import FocusStats, summarize
from focusflow.models.focus.state import EngineSnapshot, EngineStatus
from focusflow.models.focus.ui import TimerDisplay, progress_bar, summary_panel

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def snapshot(status=EngineStatus.RUNNING, phase=PhaseType.FOCUS, remaining=1200.0, count=1):
    return EngineSnapshot(
        status=status,
        current_phase=phase,
        time_remaining_seconds=remaining,
        total_seconds=1500,
        progress_fraction=1 - remaining / 1500,
        current_session=None,
        completed_focus_count=count,
    )


def render(renderable) -> str:
    console = Console(file=StringIO(), width=100, height=30, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestLayout:
    def test_running_layout(self):
        display = TimerDisplay()
        output = render(display.create_layout(snapshot(), task_title="Write report"))

        assert "Focus" in output
        assert "20:00" in output
        assert "Write report" in output
        assert "Pomodoro 2/4" in output
        assert "1 focus completed" in output
        assert "'p' pause" in output

    def test_paused_layout(self):
        output = render(TimerDisplay().create_layout(snapshot(EngineStatus.PAUSED)))

        assert "PAUSED" in output
        assert "'r' resume" in output

    def test_idle_layout(self):
        output = render(
            TimerDisplay().create_layout(
                snapshot(EngineStatus.IDLE, PhaseType.SHORT_BREAK, 300.0)
            )
        )

        assert "Up next: Short Break" in output
        assert "05:00" in output
        assert "Press Enter to start" in output

    def test_cycle_slot_wraps_with_custom_interval(self):
        display = TimerDisplay(long_break_interval=2)
        output = render(display.create_layout(snapshot(count=2)))

        assert "Pomodoro 1/2" in output

    def test_invalid_interval_falls_back_to_default(self):
        assert TimerDisplay(long_break_interval=0).long_break_interval == 4

    def test_task_hidden_during_break(self):
        output = render(
            TimerDisplay().create_layout(
                snapshot(phase=PhaseType.SHORT_BREAK, remaining=200.0), task_title="Write report"
            )
        )
        assert "Write report" not in output

    def test_error_replaces_hints(self):
        output = render(TimerDisplay().create_layout(snapshot(), error="disk full"))

        assert "disk full" in output
        assert "'p' pause" not in output


class TestHandleKey:
    def test_key_mapping(self):
        display = TimerDisplay()
        engine = MagicMock()

        assert display.handle_key(engine, "p") is True
        engine.pause.assert_called_once()
        display.handle_key(engine, "r")
        engine.resume.assert_called_once()
        display.handle_key(engine, "s")
        engine.skip.assert_called_once()
        display.handle_key(engine, "x")
        engine.reset.assert_called_once()
        display.handle_key(engine, "\r")
        engine.start.assert_called_once()

    def test_quit(self):
        assert TimerDisplay().handle_key(MagicMock(), "q") is False

    def test_no_key_and_unknown_key(self):
        engine = MagicMock()
        display = TimerDisplay()

        assert display.handle_key(engine, None) is True
        assert display.handle_key(engine, "z") is True
        assert engine.method_calls == []


class TestRun:
    def test_quits_and_restores_keyboard(self):
        console = Console(file=StringIO(), width=80, height=24)
        display = TimerDisplay(console)
        engine = MagicMock()
        engine.snapshot.return_value = snapshot()
        engine.last_error = None
        keyboard = MagicMock()
        keyboard.get_key.side_effect = [None, "p", "q"]

        with patch("focusflow.models.focus.ui.time.sleep"):
            result = display.run(engine, keyboard)

        assert result == "quit"
        engine.pause.assert_called_once()
        keyboard.stop.assert_called_once()

    def test_interrupt(self):
        console = Console(file=StringIO(), width=80, height=24)
        engine = MagicMock()
        engine.snapshot.return_value = snapshot()
        engine.last_error = None
        keyboard = MagicMock()
        keyboard.get_key.side_effect = KeyboardInterrupt

        result = TimerDisplay(console).run(engine, keyboard)

        assert result == "interrupted"
        keyboard.stop.assert_called_once()


class TestHelpers:
    def test_progress_bar(self):
        assert progress_bar(0.5, width=10) == "▓▓▓▓▓░░░░░  50%"
        assert progress_bar(2.0, width=4) == "▓▓▓▓  100%"
        assert progress_bar(-1, width=4) == "░░░░  0%"

    def test_summary_panel_empty(self):
        assert "No phases completed" in render(summary_panel(FocusStats()))

    def test_summary_panel_counts(self):
        base = SessionRecord.create(
            user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25, now=NOW
        )
        records = [
            base.finalized(NOW),
            SessionRecord.create(
                user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25, now=NOW
            ).finalized(NOW, skipped=True),
            SessionRecord.create(
                user_id="u1", phase_type=PhaseType.SHORT_BREAK, duration_minutes=5, now=NOW
            ).finalized(NOW),
        ]

        output = render(summary_panel(summarize(records, NOW)))

        assert "Focus phases completed: 2" in output
        assert "Focus minutes: 25" in output
        assert "Phases finished: 3 (1 skipped)" in output
