"""Background asyncio loop for fire-and-forget store calls.

The timer engine is driven synchronously from the UI thread and the tick
thread, while repositories expose coroutines. ``AsyncRunner`` hosts one event
loop on a daemon thread and runs submitted coroutines there, one at a time, in
submission order.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Coroutine
from typing import Any, Optional


class AsyncRunner:
    """Threaded asyncio loop executing coroutines serially."""

    def __init__(self, name: str = "focusflow-store", logger: Optional[logging.Logger] = None):
        self._name = name
        self._logger = logger or logging.getLogger("focusflow.background")
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._serial: Optional[asyncio.Lock] = None
        self._started = threading.Event()
        self._lock = threading.Lock()
        self._pending: set[concurrent.futures.Future] = set()
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        """Schedule ``coro`` behind every earlier submission.

        Returns a future holding the coroutine's result or exception. The
        caller may ignore it.

        Raises:
            RuntimeError: If the runner has been stopped
        """
        with self._lock:
            if self._stopped:
                coro.close()
                raise RuntimeError(f"{self._name} runner is stopped")
            self._ensure_started()
            future = asyncio.run_coroutine_threadsafe(self._serialized(coro), self._loop)
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def drain(self, timeout: Optional[float] = 5.0) -> bool:
        """Block until everything submitted so far has finished.

        Returns:
            True if all work finished within ``timeout``
        """
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    def stop(self, timeout: float = 5.0) -> None:
        """Finish outstanding work and shut the loop down."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
        if self._thread is None:
            return

        if not self.drain(timeout):
            self._logger.warning("%s runner stopped with work still pending", self._name)

        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            self._logger.error(
                "%s runner thread did not stop within %.1fs", self._name, timeout
            )
        self._thread = None

    def _ensure_started(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name=self._name)
        self._thread.start()
        self._started.wait()

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._serial = asyncio.Lock()
        self._started.set()
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            self._loop.close()

    async def _serialized(self, coro: Coroutine[Any, Any, Any]) -> Any:
        async with self._serial:
            return await coro

    def _discard(self, future: concurrent.futures.Future) -> None:
        with self._lock:
            self._pending.discard(future)
