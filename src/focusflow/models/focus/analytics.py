"""Analytics over completed session records.

Everything here is pure: callers pass the records and the reference instant.
Days are bucketed by the completion time (``end_time``) expressed in the
timezone of ``now``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from focusflow.models.session import PhaseType, SessionRecord

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class DayCount:
    day: str
    date: date
    count: int


@dataclass(frozen=True)
class FocusStats:
    """Summary shown by ``focusflow stats`` and after an interactive run."""

    total_completed: int = 0
    focus_completed: int = 0
    skipped: int = 0
    focus_minutes: int = 0
    today_count: int = 0
    daily_goal: int = 8
    current_streak: int = 0
    weekly: list[DayCount] = field(default_factory=list)

    @property
    def goal_progress(self) -> float:
        if self.daily_goal <= 0:
            return 0.0
        return min(1.0, self.today_count / self.daily_goal)


def _completed_focus(records: Iterable[SessionRecord]) -> list[SessionRecord]:
    return [
        r
        for r in records
        if r.completed and r.end_time is not None and r.phase_type is PhaseType.FOCUS
    ]


def _local_day(moment: datetime, now: datetime) -> date:
    if now.tzinfo is not None and moment.tzinfo is not None:
        moment = moment.astimezone(now.tzinfo)
    return moment.date()


def count_by_day(records: Iterable[SessionRecord], now: datetime) -> Counter[date]:
    """Completed focus sessions per calendar day."""
    counts: Counter[date] = Counter()
    for record in _completed_focus(records):
        counts[_local_day(record.end_time, now)] += 1
    return counts


def current_streak(records: Iterable[SessionRecord], now: datetime) -> int:
    """Consecutive days, ending today, with at least one completed focus session."""
    counts = count_by_day(records, now)
    streak = 0
    day = _local_day(now, now)
    while counts.get(day):
        streak += 1
        day -= timedelta(days=1)
    return streak


def weekly_counts(records: Iterable[SessionRecord], now: datetime) -> list[DayCount]:
    """Seven entries for the current week, Sunday first."""
    counts = count_by_day(records, now)
    today = _local_day(now, now)
    # date.weekday(): Monday == 0; shift so Sunday starts the week
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    return [
        DayCount(
            day=DAY_NAMES[offset],
            date=week_start + timedelta(days=offset),
            count=counts.get(week_start + timedelta(days=offset), 0),
        )
        for offset in range(7)
    ]


def summarize(
    records: Iterable[SessionRecord], now: datetime, daily_goal: int = 8
) -> FocusStats:
    """Build a ``FocusStats`` from ``records``."""
    records = list(records)
    completed = [r for r in records if r.completed]
    focus = _completed_focus(records)
    today = _local_day(now, now)

    return FocusStats(
        total_completed=len(completed),
        focus_completed=len(focus),
        skipped=sum(1 for r in completed if r.skipped),
        focus_minutes=sum(r.duration_minutes for r in focus if not r.skipped),
        today_count=sum(1 for r in focus if _local_day(r.end_time, now) == today),
        daily_goal=daily_goal,
        current_streak=current_streak(records, now),
        weekly=weekly_counts(records, now),
    )
