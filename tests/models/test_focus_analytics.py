"""Tests for session analytics."""

from datetime import UTC, datetime, timedelta

from focusflow.models import PhaseType, SessionRecord
from focusflow.models.focus.analytics import (
    FocusStats,
    count_by_day,
    current_streak,
    summarize,
    weekly_counts,
)

# Wednesday
NOW = datetime(2026, 3, 4, 18, 0, tzinfo=UTC)


def done(days_ago=0, phase=PhaseType.FOCUS, minutes=25, skipped=False, hour=10):
    end = (NOW - timedelta(days=days_ago)).replace(hour=hour)
    record = SessionRecord.create(
        user_id="u1",
        phase_type=phase,
        duration_minutes=minutes,
        now=end - timedelta(minutes=minutes),
    )
    return record.finalized(end, skipped=skipped)


def in_progress():
    return SessionRecord.create(
        user_id="u1", phase_type=PhaseType.FOCUS, duration_minutes=25, now=NOW
    )


class TestSummarize:
    def test_empty(self):
        stats = summarize([], NOW)

        assert stats.total_completed == 0
        assert stats.focus_completed == 0
        assert stats.current_streak == 0
        assert stats.goal_progress == 0.0
        assert len(stats.weekly) == 7

    def test_counts_only_completed_focus(self):
        records = [
            done(),
            done(hour=11),
            done(phase=PhaseType.SHORT_BREAK, minutes=5),
            done(skipped=True, hour=12),
            in_progress(),
        ]

        stats = summarize(records, NOW, daily_goal=4)

        assert stats.total_completed == 4
        assert stats.focus_completed == 3
        assert stats.skipped == 1
        assert stats.focus_minutes == 50
        assert stats.today_count == 3
        assert stats.goal_progress == 0.75

    def test_goal_progress_caps_at_one(self):
        stats = FocusStats(today_count=12, daily_goal=8)
        assert stats.goal_progress == 1.0


class TestStreak:
    def test_consecutive_days(self):
        records = [done(0), done(1), done(2), done(4)]
        assert current_streak(records, NOW) == 3

    def test_no_session_today_breaks_streak(self):
        assert current_streak([done(1), done(2)], NOW) == 0

    def test_breaks_do_not_count(self):
        assert current_streak([done(0, phase=PhaseType.LONG_BREAK, minutes=15)], NOW) == 0


class TestWeekly:
    def test_week_starts_on_sunday(self):
        week = weekly_counts([], NOW)

        assert [d.day for d in week] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert week[0].date == datetime(2026, 3, 1).date()
        assert week[3].date == NOW.date()

    def test_counts_land_on_their_day(self):
        records = [done(0), done(0, hour=12), done(2)]
        week = weekly_counts(records, NOW)

        assert week[3].count == 2  # Wednesday
        assert week[1].count == 1  # Monday
        assert sum(d.count for d in week) == 3

    def test_last_week_excluded(self):
        week = weekly_counts([done(7)], NOW)
        assert sum(d.count for d in week) == 0


def test_days_use_timezone_of_now():
    tz = datetime(2026, 3, 4, tzinfo=UTC).astimezone().tzinfo
    local_now = NOW.astimezone(tz)
    counts = count_by_day([done()], local_now)

    assert sum(counts.values()) == 1
