"""
Study Timer - Pomodoro session state machine

One StudyTimer belongs to one page view. It counts down the current phase
one second per tick, records finished work sessions, notifies on every
natural completion and publishes a TimerSnapshot to its listeners after
every change. The view that created it must call `dispose()` when it ends.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Set

from .constants import DOCUMENT_TITLE_SUFFIX, SESSIONS_BEFORE_LONG_BREAK, TICK_INTERVAL_MS
from .errors import InvalidTransitionError, StorageError
from .models.timer_state import DurationConfig, SessionPhase, TimerSnapshot, TimerState, TimerStatus
from .notifications import NotificationDispatcher
from .persistence import SessionPersistenceGateway
from .scheduler import CancelHandle, Scheduler
from studyhub.utils.time_format import format_clock

logger = logging.getLogger(__name__)

Listener = Callable[[TimerSnapshot], None]

_BUTTON_LABELS = {
    TimerStatus.IDLE: "Start",
    TimerStatus.RUNNING: "Pause",
    TimerStatus.PAUSED: "Resume",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_phase(completed: SessionPhase, completed_work_sessions: int) -> SessionPhase:
    """Phase that follows `completed`, given the count of natural work completions so far"""
    if completed is SessionPhase.WORK:
        if completed_work_sessions % SESSIONS_BEFORE_LONG_BREAK == 0:
            return SessionPhase.LONG_BREAK
        return SessionPhase.SHORT_BREAK
    return SessionPhase.WORK


class StudyTimer:
    """Pomodoro timer for one page view"""

    def __init__(
        self,
        user_id: str,
        scheduler: Scheduler,
        gateway: Optional[SessionPersistenceGateway] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        durations: Optional[DurationConfig] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.user_id = user_id
        self._scheduler = scheduler
        self._gateway = gateway
        self._dispatcher = dispatcher or NotificationDispatcher()
        self._durations = durations or DurationConfig()
        self._clock = clock
        self._state = TimerState(remaining_seconds=self._durations.work_seconds)
        self._handle: Optional[CancelHandle] = None
        self._listeners: List[Listener] = []
        self._pending: Set[asyncio.Task] = set()
        self._disposed = False

    # ---- Read side ----

    @property
    def state(self) -> TimerState:
        return self._state.model_copy()

    @property
    def durations(self) -> DurationConfig:
        return self._durations

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def status(self) -> TimerStatus:
        return self._state.status

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def completed_work_sessions(self) -> int:
        return self._state.completed_work_sessions

    @property
    def scheduler_active(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def disposed(self) -> bool:
        return self._disposed

    def snapshot(self, notice: Optional[str] = None) -> TimerSnapshot:
        state = self._state
        display = format_clock(state.remaining_seconds)
        return TimerSnapshot(
            phase=state.phase,
            phase_label=state.phase.label,
            remaining_seconds=state.remaining_seconds,
            status=state.status,
            completed_work_sessions=state.completed_work_sessions,
            phase_started_at=state.phase_started_at,
            display=display,
            title=f"{display} - {DOCUMENT_TITLE_SUFFIX}",
            button_label=_BUTTON_LABELS[state.status],
            durations=self._durations,
            notice=notice,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- Transitions ----

    def start(self):
        self._ensure_alive("start")
        if self._state.status is TimerStatus.RUNNING:
            raise InvalidTransitionError("start", self._state.status.value)

        if self._state.status is TimerStatus.IDLE and self._state.phase is SessionPhase.WORK:
            self._state.phase_started_at = self._clock()

        self._state.status = TimerStatus.RUNNING
        self._handle = self._scheduler.schedule_repeating(TICK_INTERVAL_MS, self.tick)
        logger.info(f"Timer started for user {self.user_id}: {self._state.phase.value}, {self._state.remaining_seconds}s left")
        self._emit()

    def pause(self):
        self._ensure_alive("pause")
        if self._state.status is not TimerStatus.RUNNING:
            raise InvalidTransitionError("pause", self._state.status.value)

        self._cancel_schedule()
        self._state.status = TimerStatus.PAUSED
        logger.info(f"Timer paused for user {self.user_id} at {self._state.remaining_seconds}s")
        self._emit()

    def toggle(self):
        """Start/Pause/Resume button"""
        if self._state.status is TimerStatus.RUNNING:
            self.pause()
        else:
            self.start()

    def reset(self):
        self._ensure_alive("reset")
        self._restore_phase()
        self._emit()

    def tick(self):
        if self._disposed or self._state.status is not TimerStatus.RUNNING:
            logger.debug("Ignoring tick while timer is not running")
            return

        self._state.remaining_seconds = max(0, self._state.remaining_seconds - 1)
        if self._state.remaining_seconds == 0:
            self.complete_phase()
        else:
            self._emit()

    def complete_phase(self):
        """Natural end of the current phase"""
        self._ensure_alive("complete")
        completed = self._state.phase
        self._cancel_schedule()
        self._state.status = TimerStatus.IDLE
        completed_at = self._clock()

        if completed is SessionPhase.WORK:
            started_at = self._state.phase_started_at or completed_at - timedelta(
                seconds=self._durations.work_seconds
            )
            self._dispatch(
                self._record_session(self._durations.work_minutes, started_at, completed_at)
            )
            self._state.completed_work_sessions += 1

        self._dispatch(self._dispatcher.notify_phase_complete(completed))
        self._advance(completed)
        logger.info(
            f"{completed.label} completed for user {self.user_id}; "
            f"next: {self._state.phase.label} ({self._state.completed_work_sessions} pomodoros)"
        )
        kind = "Break" if completed.is_break else "Work"
        self._emit(notice=f"{kind} session completed! Great job!")

    def skip(self):
        """Manual advance. Not persisted, not notified, not counted."""
        self._ensure_alive("skip")
        skipped = self._state.phase
        self._cancel_schedule()
        self._state.status = TimerStatus.IDLE
        self._advance(skipped)
        logger.info(f"{skipped.label} skipped for user {self.user_id}")
        self._emit(notice="Session skipped!")

    def set_durations(self, work, short_break, long_break):
        """
        Apply new durations in minutes and reset the current phase to its new length.

        Raises:
            DurationValidationError: on invalid input; the timer is left untouched
        """
        self._ensure_alive("configure")
        durations = DurationConfig.from_minutes(work, short_break, long_break)
        self._durations = durations
        self._restore_phase()
        logger.info(
            f"Durations updated for user {self.user_id}: "
            f"{durations.work_seconds}s/{durations.short_break_seconds}s/{durations.long_break_seconds}s"
        )
        self._emit(notice="Timer settings updated!")

    # ---- Teardown ----

    def dispose(self):
        """End of the page view. Cancels the live tick and drops listeners."""
        if self._disposed:
            return
        self._cancel_schedule()
        self._disposed = True
        self._listeners.clear()
        logger.info(f"Timer disposed for user {self.user_id}")

    async def drain(self):
        """Wait for in-flight persistence and notification tasks"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ---- Internals ----

    def _ensure_alive(self, operation: str):
        if self._disposed:
            raise InvalidTransitionError(operation, "disposed")

    def _cancel_schedule(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _restore_phase(self):
        self._cancel_schedule()
        self._state.remaining_seconds = self._durations.seconds_for(self._state.phase)
        self._state.status = TimerStatus.IDLE
        self._state.phase_started_at = None

    def _advance(self, completed: SessionPhase):
        upcoming = next_phase(completed, self._state.completed_work_sessions)
        self._state.phase = upcoming
        self._state.remaining_seconds = self._durations.seconds_for(upcoming)
        self._state.phase_started_at = None

    async def _record_session(self, duration_minutes: int, started_at: datetime, completed_at: datetime):
        if self._gateway is None:
            logger.debug("No persistence gateway attached; session not recorded")
            return
        try:
            await self._gateway.record_completed_session(
                self.user_id,
                duration_minutes,
                started_at,
                completed_at,
            )
        except StorageError as e:
            logger.warning(f"Error saving study session for user {self.user_id}: {e}")
            self._emit(notice="Could not save study session")

    def _dispatch(self, coro: Awaitable):
        """Fire-and-forget on the running loop; run to completion when there is none"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                asyncio.run(coro)
            except Exception as e:
                logger.error(f"Timer side effect failed: {e}", exc_info=True)
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Timer side effect failed: {error}", exc_info=error)

    def _emit(self, notice: Optional[str] = None):
        if self._disposed or not self._listeners:
            return
        snapshot = self.snapshot(notice)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Timer listener failed: {e}", exc_info=True)
