"""Tests for tick sources."""

import threading
import time

import pytest

from focusflow.utils.ticks import ManualTickSource, ThreadTickSource


class TestThreadTickSource:
    def test_ticks_until_cancelled(self):
        ticked = threading.Event()
        count = []

        def on_tick():
            count.append(1)
            if len(count) >= 3:
                ticked.set()

        source = ThreadTickSource(interval=0.01)
        source.start(on_tick)
        assert source.is_active

        assert ticked.wait(timeout=2)
        source.cancel()
        seen = len(count)
        time.sleep(0.05)

        assert not source.is_active
        assert len(count) == seen

    def test_cancel_before_start(self):
        source = ThreadTickSource()
        source.cancel()
        assert not source.is_active

    def test_cancel_from_inside_callback(self):
        done = threading.Event()
        source = ThreadTickSource(interval=0.01)

        def on_tick():
            source.cancel()
            done.set()

        source.start(on_tick)
        assert done.wait(timeout=2)
        assert not source.is_active

    def test_callback_errors_do_not_stop_ticking(self):
        count = []
        enough = threading.Event()

        def on_tick():
            count.append(1)
            if len(count) >= 2:
                enough.set()
            raise RuntimeError("boom")

        source = ThreadTickSource(interval=0.01)
        source.start(on_tick)
        try:
            assert enough.wait(timeout=2)
        finally:
            source.cancel()

    def test_start_twice(self):
        source = ThreadTickSource(interval=1)
        source.start(lambda: None)
        try:
            with pytest.raises(RuntimeError):
                source.start(lambda: None)
        finally:
            source.cancel()

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            ThreadTickSource(interval=0)


class TestManualTickSource:
    def test_fire_only_while_active(self):
        calls = []
        source = ManualTickSource()

        assert source.fire() is False
        source.start(lambda: calls.append(1))
        assert source.fire() is True
        source.cancel()
        assert source.fire() is False

        assert calls == [1]
        assert (source.starts, source.cancels) == (1, 1)
