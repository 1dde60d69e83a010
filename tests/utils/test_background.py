"""Tests for the background asyncio runner."""

import asyncio

import pytest

from focusflow.utils.background import AsyncRunner


@pytest.fixture()
def runner():
    r = AsyncRunner(name="test-runner")
    yield r
    r.stop()


class TestAsyncRunner:
    def test_lazy_start(self, runner):
        assert not runner.is_running

    def test_submit_returns_result(self, runner):
        async def answer():
            return 42

        assert runner.submit(answer()).result(timeout=2) == 42
        assert runner.is_running

    def test_runs_in_submission_order(self, runner):
        order = []

        async def step(name, delay):
            await asyncio.sleep(delay)
            order.append(name)

        runner.submit(step("slow", 0.05))
        runner.submit(step("fast", 0))
        assert runner.drain(timeout=2)

        assert order == ["slow", "fast"]

    def test_exceptions_land_in_future(self, runner):
        async def broken():
            raise OSError("disk full")

        future = runner.submit(broken())
        with pytest.raises(OSError):
            future.result(timeout=2)

    def test_drain_with_nothing_pending(self, runner):
        assert runner.drain() is True

    def test_submit_after_stop(self, runner):
        runner.stop()

        async def noop():
            return None

        with pytest.raises(RuntimeError):
            runner.submit(noop())

    def test_stop_finishes_pending_work(self):
        runner = AsyncRunner()
        done = []

        async def work():
            await asyncio.sleep(0.02)
            done.append(True)

        runner.submit(work())
        runner.stop()

        assert done == [True]
        assert not runner.is_running

    def test_stop_is_idempotent(self, runner):
        runner.stop()
        runner.stop()
