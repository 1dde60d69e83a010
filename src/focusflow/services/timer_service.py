"""Session timer engine.

``SessionTimerEngine`` owns the Pomodoro state machine: it sequences phases,
accounts elapsed time against the wall clock so a suspended process still
counts down correctly, persists every phase as a ``SessionRecord`` and pushes
snapshots to observers.

Threading model: one re-entrant lock serializes commands and ticks. Work that
reaches outside the engine (observer callbacks, side-effect ports, cancelling
a tick source) is queued while the lock is held and run after it is released.
Store writes are submitted to the ``AsyncRunner`` under the lock so they reach
the store in transition order.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from collections.abc import Callable, Coroutine, Mapping
from contextlib import contextmanager
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from focusflow.exceptions import PersistenceError
from focusflow.models import PhaseType, SessionRecord, TimerSettings, utc_now
from focusflow.models.focus.cycling import next_phase, should_auto_start
from focusflow.models.focus.durations import preview_seconds, resolve_duration
from focusflow.models.focus.state import (
    EngineSnapshot,
    EngineState,
    IdleState,
    PausedState,
    RunningState,
    build_snapshot,
)
from focusflow.repositories import SessionRepository, TaskRepository
from focusflow.services.side_effects import (
    HapticPort,
    LiveStatusPort,
    NoOpHaptics,
    NoOpLiveStatus,
    NoOpNotifications,
    NotificationPort,
)
from focusflow.utils.background import AsyncRunner
from focusflow.utils.ticks import ThreadTickSource, TickSource

# Remaining time at or below this many seconds completes the phase
COMPLETION_EPSILON = 0.001

# Stored in-progress sessions older than this are not recovered
RECOVERY_WINDOW = timedelta(hours=1)

# Seconds restore() waits for the store before giving up
LOAD_TIMEOUT = 10.0

_TICK_LOG_INTERVAL = 5.0

SnapshotListener = Callable[[EngineSnapshot], None]
CompletedListener = Callable[[SessionRecord], None]
ErrorListener = Callable[[PersistenceError], None]
SettingsLike = TimerSettings | Mapping[str, Any]


class RecoveryOutcome(str, Enum):
    """What ``restore()`` did with the stored session."""

    NONE = "none"  # nothing stored, or the load failed
    RESUMED = "resumed"
    FINALIZED = "finalized"  # its time ran out while the process was gone
    EXPIRED = "expired"  # older than the recovery window, left as is
    DISCARDED = "discarded"  # timestamps in the future, deleted


class SessionTimerEngine:
    """Pomodoro timer state machine with durable session records."""

    def __init__(
        self,
        store: SessionRepository,
        settings: Any = None,
        *,
        user_id: str,
        live_status: Optional[LiveStatusPort] = None,
        haptics: Optional[HapticPort] = None,
        notifications: Optional[NotificationPort] = None,
        tasks: Optional[TaskRepository] = None,
        tick_source_factory: Optional[Callable[[], TickSource]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        runner: Optional[AsyncRunner] = None,
        logger: Optional[logging.Logger] = None,
        load_timeout: float = LOAD_TIMEOUT,
    ):
        """Create an idle engine.

        Args:
            store: Session store port
            settings: A settings source exposing ``settings`` and
                ``subscribe`` (such as ``ConfigService``), or a static
                ``TimerSettings``/mapping, or None for defaults
            user_id: Owner key for stored records
            live_status: Live status surface
            haptics: Haptic feedback port, used when ``haptic_feedback`` is on
            notifications: Completion notification port
            tasks: Task store credited when a linked focus phase completes
            tick_source_factory: Builds a fresh tick source per running interval
            clock: Wall clock returning aware datetimes
            runner: Background loop executing store coroutines
            logger: Logger; defaults to ``focusflow.engine``
            load_timeout: Seconds ``restore()`` waits for the store
        """
        self._store = store
        self._user_id = user_id
        self._live_status = live_status or NoOpLiveStatus()
        self._haptics = haptics or NoOpHaptics()
        self._notifications = notifications or NoOpNotifications()
        self._tasks = tasks
        self._tick_source_factory = tick_source_factory or ThreadTickSource
        self._clock = clock or utc_now
        self._owns_runner = runner is None
        self._runner = runner or AsyncRunner()
        self._logger = logger or logging.getLogger("focusflow.engine")
        self._load_timeout = load_timeout

        self._settings_source = settings if hasattr(settings, "subscribe") else None
        self._static_settings: Optional[SettingsLike] = (
            None if self._settings_source is not None else settings
        )

        self._lock = threading.RLock()
        self._effects: Optional[list[Callable[[], None]]] = None
        self._write_futures: dict[str, concurrent.futures.Future] = {}
        self._ticks: Optional[TickSource] = None
        self._last_tick_log = 0.0

        self._listeners: list[SnapshotListener] = []
        self._completed_listeners: list[CompletedListener] = []
        self._error_listeners: list[ErrorListener] = []

        self._completed: list[SessionRecord] = []
        self._focus_count = 0
        self._selected_task_id: Optional[str] = None
        self._last_error: Optional[PersistenceError] = None
        self._restored = False
        self._closed = False

        self._state: EngineState = IdleState(
            PhaseType.FOCUS, preview_seconds(PhaseType.FOCUS, self._settings())
        )

        self._unsubscribe_settings: Optional[Callable[[], None]] = None
        if self._settings_source is not None:
            self._unsubscribe_settings = self._settings_source.subscribe(
                self._on_settings_changed
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def selected_task_id(self) -> Optional[str]:
        return self._selected_task_id

    @property
    def last_error(self) -> Optional[PersistenceError]:
        return self._last_error

    def clear_error(self) -> None:
        self._last_error = None

    def snapshot(self) -> EngineSnapshot:
        """Current observable state, recomputed from the wall clock."""
        with self._lock:
            return self._snapshot_locked()

    def completed_sessions(self) -> list[SessionRecord]:
        """Records finalized by this engine, oldest first."""
        with self._lock:
            return list(self._completed)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, phase: Optional[PhaseType] = None, task_id: Optional[str] = None) -> bool:
        """Start ``phase`` (default: the idle preview phase) from Idle.

        ``task_id`` overrides the selected task for a focus phase; breaks
        never carry a task. Returns False when a phase is already in progress.
        """
        with self._transition():
            if not isinstance(self._state, IdleState) or self._closed:
                return False
            self._start_locked(phase or self._state.phase, task_id)
            return True

    def pause(self) -> bool:
        """Freeze the running phase, banking its elapsed time."""
        with self._transition():
            state = self._state
            if not isinstance(state, RunningState) or self._closed:
                return False

            now = self._clock()
            session = state.session.touched(now)
            self._state = PausedState(session, state.total_seconds, state.elapsed(now))
            self._stop_ticks_locked()
            self._persist_locked(session, "pause")

            snapshot = self._snapshot_locked(now)
            self._defer(self._notifications.cancel_completion)
            self._defer(
                self._live_status.on_tick,
                snapshot.current_phase,
                snapshot.time_remaining_seconds,
                snapshot.progress_fraction,
                False,
            )
            self._haptic_locked("timer_pause")
            self._publish_locked(snapshot)
            self._logger.info(
                "Paused %s with %.0fs remaining",
                session.phase_type.value,
                snapshot.time_remaining_seconds,
            )
            return True

    def resume(self) -> bool:
        """Continue a paused phase from the current instant."""
        with self._transition():
            state = self._state
            if not isinstance(state, PausedState) or self._closed:
                return False

            now = self._clock()
            session = state.session.touched(now)
            self._state = RunningState(session, state.total_seconds, state.accumulated_seconds, now)
            self._start_ticks_locked()
            self._persist_locked(session, "resume")

            snapshot = self._snapshot_locked(now)
            self._schedule_notification_locked(snapshot)
            self._defer(
                self._live_status.on_tick,
                snapshot.current_phase,
                snapshot.time_remaining_seconds,
                snapshot.progress_fraction,
                True,
            )
            self._haptic_locked("timer_start")
            self._publish_locked(snapshot)
            self._logger.info(
                "Resumed %s with %.0fs remaining",
                session.phase_type.value,
                snapshot.time_remaining_seconds,
            )
            return True

    def reset(self) -> bool:
        """Abandon the phase in progress and delete its record."""
        with self._transition():
            state = self._state
            if isinstance(state, IdleState) or self._closed:
                return False

            session = state.session
            self._stop_ticks_locked()
            self._submit_locked(
                self._store.delete(session.id), "delete", session.id
            )
            self._state = IdleState(
                session.phase_type, preview_seconds(session.phase_type, self._settings())
            )

            self._defer(self._notifications.cancel_completion)
            self._defer(self._live_status.on_phase_end)
            self._haptic_locked("impact")
            self._publish_locked()
            self._logger.info("Reset %s session %s", session.phase_type.value, session.id)
            return True

    def skip(self) -> bool:
        """Finish the current phase now and start the next one immediately.

        The skipped record is stored as completed with ``skipped`` set, and
        its duration is left as configured.
        """
        with self._transition():
            if isinstance(self._state, IdleState) or self._closed:
                return False
            self._defer(self._notifications.cancel_completion)
            upcoming = self._complete_locked(skipped=True)
            self._start_locked(upcoming)
            return True

    def complete(self) -> Optional[concurrent.futures.Future]:
        """Finish the current phase as if its time had run out.

        Returns:
            Future for the store write of the finalized record, or None when
            no phase is in progress
        """
        with self._transition():
            if isinstance(self._state, IdleState) or self._closed:
                return None
            session_id = self._state.session.id
            upcoming = self._complete_locked(skipped=False)
            future = self._write_futures.pop(session_id, None)
            self._auto_start_locked(upcoming)
            return future

    def select_task(self, task_id: Optional[str]) -> None:
        """Link ``task_id`` to the next focus phase started."""
        with self._lock:
            self._selected_task_id = task_id

    def restore(self) -> RecoveryOutcome:
        """Recover the session left in progress by a previous process.

        Only the first call does anything, and only while idle.
        """
        with self._lock:
            if self._restored or self._closed or not isinstance(self._state, IdleState):
                return RecoveryOutcome.NONE
            self._restored = True

        future = None
        try:
            future = self._runner.submit(
                self._store.load_most_recent_incomplete(self._user_id)
            )
            record = future.result(timeout=self._load_timeout)
        except Exception as e:
            if future is not None:
                future.cancel()
            self._report_error(PersistenceError("load_most_recent_incomplete", cause=e))
            return RecoveryOutcome.NONE

        if record is None:
            return RecoveryOutcome.NONE

        with self._transition():
            if not isinstance(self._state, IdleState):
                return RecoveryOutcome.NONE
            return self._restore_locked(record)

    def tick(self) -> None:
        """Recompute remaining time and complete the phase when it runs out."""
        with self._transition():
            self._tick_locked()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Receive a snapshot after every change; returns an unsubscribe callable."""
        return self._add_listener(self._listeners, listener)

    def subscribe_completed(self, listener: CompletedListener) -> Callable[[], None]:
        """Receive each finalized record, in completion order."""
        return self._add_listener(self._completed_listeners, listener)

    def subscribe_errors(self, listener: ErrorListener) -> Callable[[], None]:
        """Receive store failures as ``PersistenceError``."""
        return self._add_listener(self._error_listeners, listener)

    def close(self) -> None:
        """Stop ticking and wait for outstanding store writes.

        Commands and ticks are ignored afterwards; a running phase stays
        stored in progress so the next process can recover it.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            ticks, self._ticks = self._ticks, None

        if ticks is not None:
            ticks.cancel()
        if self._unsubscribe_settings is not None:
            self._unsubscribe_settings()
            self._unsubscribe_settings = None
        if self._owns_runner:
            self._runner.stop()
        elif not self._runner.drain():
            self._logger.warning("Store writes still pending at close")

    # ------------------------------------------------------------------
    # Transitions (lock held)
    # ------------------------------------------------------------------

    @contextmanager
    def _transition(self):
        with self._lock:
            outer = self._effects is None
            if outer:
                self._effects = []
                self._write_futures = {}
            try:
                yield
            finally:
                if outer:
                    effects, self._effects = self._effects, None
        if outer:
            self._run_effects(effects)

    def _start_locked(self, phase: PhaseType, task_id: Optional[str] = None) -> None:
        now = self._clock()
        settings = self._settings()
        minutes = resolve_duration(phase, settings)
        if phase is PhaseType.FOCUS:
            task_id = task_id or self._selected_task_id
        else:
            task_id = None

        session = SessionRecord.create(
            user_id=self._user_id,
            phase_type=phase,
            duration_minutes=minutes,
            now=now,
            task_id=task_id,
        )
        self._state = RunningState(session, session.total_seconds, 0.0, now)
        self._start_ticks_locked()
        self._persist_locked(session, "start")

        snapshot = self._snapshot_locked(now)
        self._schedule_notification_locked(snapshot)
        self._defer(self._live_status.on_phase_start, phase, float(session.total_seconds))
        self._haptic_locked("timer_start")
        self._publish_locked(snapshot)
        self._logger.info(
            "Started %s for %d min (session %s)", phase.value, minutes, session.id
        )

    def _tick_locked(self) -> None:
        state = self._state
        if not isinstance(state, RunningState) or self._closed:
            return

        now = self._clock()
        snapshot = self._snapshot_locked(now)
        if snapshot.time_remaining_seconds <= COMPLETION_EPSILON:
            upcoming = self._complete_locked(skipped=False)
            self._auto_start_locked(upcoming)
            return

        self._defer(
            self._live_status.on_tick,
            snapshot.current_phase,
            snapshot.time_remaining_seconds,
            snapshot.progress_fraction,
            True,
        )
        self._publish_locked(snapshot)

        mono = time.monotonic()
        if mono - self._last_tick_log >= _TICK_LOG_INTERVAL:
            self._last_tick_log = mono
            self._logger.debug("tick t-%ds", int(snapshot.time_remaining_seconds))

    def _complete_locked(self, skipped: bool) -> PhaseType:
        """Finalize the current record and return the phase that follows it.

        Leaves the engine Idle on the next phase; callers decide whether to
        start it.
        """
        state = self._state
        now = self._clock()
        record = state.session.finalized(now, skipped=skipped)
        self._stop_ticks_locked()
        self._persist_locked(record, "complete")

        self._completed.append(record)
        if record.phase_type is PhaseType.FOCUS:
            self._focus_count += 1
            if record.task_id and self._tasks is not None:
                self._submit_locked(
                    self._tasks.increment_pomodoros(record.task_id),
                    "increment_pomodoros",
                    record.id,
                )

        settings = self._settings()
        upcoming = next_phase(
            record.phase_type, self._focus_count, _setting(settings, "long_break_interval")
        )
        self._state = IdleState(upcoming, preview_seconds(upcoming, settings))

        for listener in list(self._completed_listeners):
            self._defer(self._call_listener, listener, record)
        self._defer(self._live_status.on_phase_end)
        self._haptic_locked("timer_complete")
        self._haptic_locked("phase_transition")
        self._logger.info(
            "%s %s session %s; next is %s",
            "Skipped" if skipped else "Completed",
            record.phase_type.value,
            record.id,
            upcoming.value,
        )
        return upcoming

    def _auto_start_locked(self, upcoming: PhaseType) -> None:
        completed = self._completed[-1].phase_type
        if should_auto_start(completed, self._settings()):
            self._start_locked(upcoming)
        else:
            self._publish_locked()

    def _restore_locked(self, record: SessionRecord) -> RecoveryOutcome:
        now = self._clock()

        if record.start_time > now or record.created_at > now:
            self._logger.warning("Discarding session %s with future timestamps", record.id)
            self._submit_locked(self._store.delete(record.id), "delete", record.id)
            return RecoveryOutcome.DISCARDED

        if now - record.created_at > RECOVERY_WINDOW:
            self._logger.info("Not recovering session %s; older than %s", record.id, RECOVERY_WINDOW)
            return RecoveryOutcome.EXPIRED

        self._state = RunningState(record, record.total_seconds, 0.0, record.start_time)
        snapshot = self._snapshot_locked(now)

        if snapshot.time_remaining_seconds <= COMPLETION_EPSILON:
            upcoming = self._complete_locked(skipped=False)
            self._auto_start_locked(upcoming)
            return RecoveryOutcome.FINALIZED

        self._start_ticks_locked()
        self._schedule_notification_locked(snapshot)
        self._defer(
            self._live_status.on_phase_start, record.phase_type, float(record.total_seconds)
        )
        self._defer(
            self._live_status.on_tick,
            snapshot.current_phase,
            snapshot.time_remaining_seconds,
            snapshot.progress_fraction,
            True,
        )
        self._publish_locked(snapshot)
        self._logger.info(
            "Recovered %s session %s with %.0fs remaining",
            record.phase_type.value,
            record.id,
            snapshot.time_remaining_seconds,
        )
        return RecoveryOutcome.RESUMED

    # ------------------------------------------------------------------
    # Helpers (lock held)
    # ------------------------------------------------------------------

    def _snapshot_locked(self, now: Optional[datetime] = None) -> EngineSnapshot:
        return build_snapshot(self._state, now or self._clock(), self._focus_count)

    def _start_ticks_locked(self) -> None:
        self._stop_ticks_locked()
        source = self._tick_source_factory()
        self._ticks = source
        source.start(lambda: self._on_tick(source))

    def _stop_ticks_locked(self) -> None:
        source, self._ticks = self._ticks, None
        if source is not None:
            self._defer(source.cancel)

    def _on_tick(self, source: TickSource) -> None:
        with self._transition():
            if source is not self._ticks:
                return  # stale tick from a cancelled source
            self._tick_locked()

    def _persist_locked(self, record: SessionRecord, operation: str) -> None:
        future = self._submit_locked(
            self._store.create_or_update(record), operation, record.id
        )
        if future is not None:
            self._write_futures[record.id] = future

    def _submit_locked(
        self, coro: Coroutine[Any, Any, Any], operation: str, record_id: Optional[str]
    ) -> Optional[concurrent.futures.Future]:
        try:
            return self._runner.submit(self._guarded(coro, operation, record_id))
        except RuntimeError as e:
            self._defer(self._report_error, PersistenceError(operation, record_id, e))
            return None

    def _schedule_notification_locked(self, snapshot: EngineSnapshot) -> None:
        self._defer(
            self._notifications.schedule_completion,
            "Focus Session",
            f"{snapshot.current_phase.display_name} session completed!",
            snapshot.time_remaining_seconds,
        )

    def _haptic_locked(self, name: str) -> None:
        if _setting(self._settings(), "haptic_feedback") is not False:
            self._defer(getattr(self._haptics, name))

    def _publish_locked(self, snapshot: Optional[EngineSnapshot] = None) -> None:
        snapshot = snapshot or self._snapshot_locked()
        for listener in list(self._listeners):
            self._defer(self._call_listener, listener, snapshot)

    def _defer(self, func: Callable[..., Any], *args: Any) -> None:
        self._effects.append(lambda: func(*args))

    # ------------------------------------------------------------------
    # Outside the lock
    # ------------------------------------------------------------------

    def _run_effects(self, effects: list[Callable[[], None]]) -> None:
        for effect in effects:
            try:
                effect()
            except Exception:
                self._logger.exception("Side effect failed")

    def _call_listener(self, listener: Callable[[Any], None], value: Any) -> None:
        try:
            listener(value)
        except Exception:
            self._logger.exception("Listener %r failed", listener)

    async def _guarded(
        self, coro: Coroutine[Any, Any, Any], operation: str, record_id: Optional[str]
    ) -> Any:
        # Runs on the runner thread; the error is reported before the future resolves
        try:
            return await coro
        except Exception as e:
            self._report_error(PersistenceError(operation, record_id, e))
            raise

    def _report_error(self, error: PersistenceError) -> None:
        self._logger.error("Session store error: %s", error)
        self._last_error = error
        with self._lock:
            listeners = list(self._error_listeners)
        for listener in listeners:
            self._call_listener(listener, error)

    def _on_settings_changed(self, settings: TimerSettings) -> None:
        with self._transition():
            state = self._state
            if not isinstance(state, IdleState):
                return
            self._state = IdleState(state.phase, preview_seconds(state.phase, self._settings()))
            self._publish_locked()

    def _add_listener(self, listeners: list, listener: Callable) -> Callable[[], None]:
        with self._lock:
            listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def _settings(self) -> Optional[SettingsLike]:
        if self._settings_source is not None:
            return self._settings_source.settings
        return self._static_settings


def _setting(settings: Optional[SettingsLike], key: str) -> Any:
    if settings is None:
        return None
    if isinstance(settings, Mapping):
        return settings.get(key)
    return getattr(settings, key, None)
