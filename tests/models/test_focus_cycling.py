"""Tests for phase sequencing and auto-start policy."""

import pytest

from focusflow.models import PhaseType, TimerSettings
from focusflow.models.focus.cycling import (
    cycle_position,
    next_phase,
    progress_dots,
    should_auto_start,
)

F, S, L = PhaseType.FOCUS, PhaseType.SHORT_BREAK, PhaseType.LONG_BREAK


class TestNextPhase:
    @pytest.mark.parametrize("count,expected", [(1, S), (2, S), (3, S), (4, L), (5, S), (8, L)])
    def test_after_focus(self, count, expected):
        assert next_phase(F, count) is expected

    def test_breaks_lead_to_focus(self):
        assert next_phase(S, 3) is F
        assert next_phase(L, 4) is F

    def test_custom_interval(self):
        assert next_phase(F, 2, 2) is L
        assert next_phase(F, 3, 2) is S

    @pytest.mark.parametrize("interval", [0, -1, None, True])
    def test_invalid_interval_uses_default(self, interval):
        assert next_phase(F, 4, interval) is L
        assert next_phase(F, 2, interval) is S

    def test_full_cycle(self):
        phase, count, seen = F, 0, []
        for _ in range(8):
            seen.append(phase)
            if phase is F:
                count += 1
            phase = next_phase(phase, count)
        assert seen == [F, S, F, S, F, S, F, L]


class TestShouldAutoStart:
    def test_defaults_off(self):
        assert should_auto_start(F, TimerSettings()) is False
        assert should_auto_start(S, TimerSettings()) is False
        assert should_auto_start(F, None) is False

    def test_break_flag_applies_after_focus(self):
        settings = TimerSettings(auto_start_break=True)
        assert should_auto_start(F, settings) is True
        assert should_auto_start(S, settings) is False

    def test_focus_flag_applies_after_any_break(self):
        settings = TimerSettings(auto_start_next_focus=True)
        assert should_auto_start(S, settings) is True
        assert should_auto_start(L, settings) is True
        assert should_auto_start(F, settings) is False

    def test_mapping_requires_real_bool(self):
        assert should_auto_start(F, {"auto_start_break": True}) is True
        assert should_auto_start(F, {"auto_start_break": "yes"}) is False


class TestProgressDots:
    def test_first_focus(self):
        assert progress_dots(0, F) == "◉ ○ ○ ○"

    def test_third_focus(self):
        assert progress_dots(2, F) == "● ● ◉ ○"

    def test_during_short_break(self):
        assert progress_dots(1, S) == "● ○ ○ ○"

    def test_long_break_shows_full_cycle(self):
        assert progress_dots(4, L) == "● ● ● ●"

    def test_cycle_position(self):
        assert cycle_position(0) == 1
        assert cycle_position(3) == 4
        assert cycle_position(4) == 1
