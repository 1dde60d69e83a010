"""Statistics over stored and in-memory session records."""

from __future__ import annotations

from datetime import datetime, timedelta

from focusflow.models import utc_now
from focusflow.models.focus.analytics import FocusStats, summarize
from focusflow.repositories import SessionRepository


class StatsService:
    """Builds ``FocusStats`` for one user."""

    def __init__(self, store: SessionRepository, user_id: str):
        self.store = store
        self.user_id = user_id

    async def collect(
        self,
        now: datetime | None = None,
        daily_goal: int = 8,
        days: int | None = None,
    ) -> FocusStats:
        """Summarize persisted records.

        Args:
            now: Reference instant; its timezone decides day boundaries
            daily_goal: Focus phases per day counted as meeting the goal
            days: Only look at the last ``days`` days (limits the streak too)
        """
        now = now or utc_now().astimezone()
        since = now - timedelta(days=days) if days is not None else None
        records = await self.store.list_sessions(self.user_id, since=since)
        return summarize(records, now, daily_goal)

    @staticmethod
    def quick_stats(engine, now: datetime | None = None, daily_goal: int = 8) -> FocusStats:
        """Summarize what ``engine`` completed in this process."""
        now = now or utc_now().astimezone()
        return summarize(engine.completed_sessions(), now, daily_goal)
