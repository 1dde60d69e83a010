"""Tests for the session record model."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from focusflow.models import PhaseType, SessionRecord

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class TestPhaseType:
    def test_values(self):
        assert [p.value for p in PhaseType] == ["focus", "short_break", "long_break"]

    @pytest.mark.parametrize(
        "phase,name,minutes",
        [
            (PhaseType.FOCUS, "Focus", 25),
            (PhaseType.SHORT_BREAK, "Short Break", 5),
            (PhaseType.LONG_BREAK, "Long Break", 15),
        ],
    )
    def test_display_name_and_default(self, phase, name, minutes):
        assert phase.display_name == name
        assert phase.default_minutes == minutes

    def test_is_break(self):
        assert not PhaseType.FOCUS.is_break
        assert PhaseType.SHORT_BREAK.is_break
        assert PhaseType.LONG_BREAK.is_break


class TestSessionRecord:
    def test_create(self):
        record = SessionRecord.create(
            user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25, now=NOW
        )

        assert record.id
        assert record.start_time == record.created_at == record.updated_at == NOW
        assert record.end_time is None
        assert record.completed is False
        assert record.skipped is False
        assert record.is_in_progress
        assert record.total_seconds == 1500

    def test_ids_are_unique(self):
        a = SessionRecord.create(user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25)
        b = SessionRecord.create(user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25)
        assert a.id != b.id

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            SessionRecord.create(
                user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=0, now=NOW
            )

    def test_records_are_immutable(self):
        record = SessionRecord.create(
            user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25, now=NOW
        )
        with pytest.raises(ValidationError):
            record.completed = True

    def test_touched_only_moves_updated_at(self):
        record = SessionRecord.create(
            user_id="u1", phase_type=PhaseType.SHORT_BREAK, duration_minutes=5, now=NOW
        )
        later = NOW + timedelta(minutes=2)

        touched = record.touched(later)

        assert touched.updated_at == later
        assert touched.start_time == NOW
        assert touched.id == record.id
        assert touched.is_in_progress

    def test_finalized(self):
        record = SessionRecord.create(
            user_id="u1",
            phase_type=PhaseType.FOCUS,
            duration_minutes=25,
            now=NOW,
            task_id="task-1",
        )
        end = NOW + timedelta(minutes=3)

        done = record.finalized(end, skipped=True)

        assert done.completed is True
        assert done.skipped is True
        assert done.end_time == end
        assert done.updated_at == end
        assert done.duration_minutes == 25
        assert done.task_id == "task-1"
        assert not done.is_in_progress
        assert record.is_in_progress

    def test_json_round_trip_keeps_timezone(self):
        record = SessionRecord.create(
            user_id="u1", phase_type=PhaseType.LONG_BREAK, duration_minutes=15, now=NOW
        )
        restored = SessionRecord.model_validate_json(record.model_dump_json())

        assert restored == record
        assert restored.start_time.tzinfo is not None
