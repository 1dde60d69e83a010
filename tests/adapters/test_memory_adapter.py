"""Tests for the in-memory repositories."""

from datetime import UTC, datetime, timedelta

import pytest

from focusflow.adapters.memory import InMemorySessionRepository, InMemoryTaskRepository
from focusflow.exceptions import NotFoundError
from focusflow.models import PhaseType, SessionRecord, TaskCreate, TaskFilters

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def make(minutes_ago=0, user_id="u1"):
    return SessionRecord.create(
        user_id=user_id,
        phase_type=PhaseType.FOCUS,
        duration_minutes=25,
        now=NOW - timedelta(minutes=minutes_ago),
    )


class TestInMemorySessionRepository:
    @pytest.mark.asyncio
    async def test_write_log(self):
        store = InMemorySessionRepository()
        record = make()

        await store.create_or_update(record)
        await store.delete(record.id)

        assert store.writes == [("upsert", record.id), ("delete", record.id)]
        assert store.records == {}

    @pytest.mark.asyncio
    async def test_seeded_records(self):
        older, newer = make(30), make(5)
        store = InMemorySessionRepository([older, newer])

        assert await store.load_most_recent_incomplete("u1") == newer
        assert await store.list_sessions("u1") == [newer, older]
        assert await store.list_sessions("u2") == []

    @pytest.mark.asyncio
    async def test_equal_timestamps_prefer_later_write(self):
        first, second = make(), make()
        store = InMemorySessionRepository([first.finalized(NOW), second])

        assert await store.load_most_recent_incomplete("u1") == second
        assert [r.id for r in await store.list_sessions("u1")] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_fail_with(self):
        store = InMemorySessionRepository()
        store.fail_with = OSError("disk full")

        with pytest.raises(OSError):
            await store.create_or_update(make())
        with pytest.raises(OSError):
            await store.load_most_recent_incomplete("u1")


class TestInMemoryTaskRepository:
    @pytest.mark.asyncio
    async def test_ids_and_listing(self):
        store = InMemoryTaskRepository()
        a = await store.add(TaskCreate(title="a"))
        b = await store.add(TaskCreate(title="b"))

        assert (a.id, b.id) == ("task-1", "task-2")
        assert len(await store.list_all(TaskFilters(limit=1))) == 1

    @pytest.mark.asyncio
    async def test_increment_missing(self):
        with pytest.raises(NotFoundError):
            await InMemoryTaskRepository().increment_pomodoros("task-9")

    @pytest.mark.asyncio
    async def test_set_completed_and_delete(self):
        store = InMemoryTaskRepository()
        task = await store.add(TaskCreate(title="a"))

        await store.set_completed(task.id, True)
        assert await store.list_all(TaskFilters()) == []

        assert await store.delete(task.id) is True
        with pytest.raises(NotFoundError):
            await store.set_completed(task.id, False)
