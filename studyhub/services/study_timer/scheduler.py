"""Countdown schedulers

A scheduler fires one callback at a fixed period until its handle is
cancelled. `AsyncioScheduler` runs on the event loop; `ManualScheduler` is a
virtual clock advanced explicitly.
"""
import asyncio
import logging
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class CancelHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> CancelHandle: ...


class AsyncioHandle:
    """Repeating call_later chain. Each firing re-arms the next one; drift is not compensated."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval_ms: int, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval_ms / 1000
        self._callback = callback
        self._timer: Optional[asyncio.TimerHandle] = None
        self._active = True
        self._arm()

    @property
    def active(self) -> bool:
        return self._active

    def _arm(self):
        self._timer = self._loop.call_later(self._interval, self._fire)

    def _fire(self):
        if not self._active:
            return
        self._arm()
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Scheduled callback failed: {e}", exc_info=True)

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> AsyncioHandle:
        loop = self._loop or asyncio.get_running_loop()
        return AsyncioHandle(loop, interval_ms, callback)


class ManualHandle:
    def __init__(self, scheduler: "ManualScheduler", interval_ms: int, callback: Callable[[], None]):
        self._scheduler = scheduler
        self.interval_ms = interval_ms
        self.callback = callback
        self.next_fire_ms = scheduler.now_ms + interval_ms
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._scheduler._handles.remove(self)


class ManualScheduler:
    """Virtual clock scheduler. Nothing fires until `advance` is called."""

    def __init__(self):
        self.now_ms = 0
        self._handles: List[ManualHandle] = []

    @property
    def active_handles(self) -> int:
        return len(self._handles)

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self, interval_ms, callback)
        self._handles.append(handle)
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every due callback in time order.

        Returns:
            Number of callbacks fired
        """
        target = self.now_ms + int(seconds * 1000)
        fired = 0
        while True:
            due = [h for h in self._handles if h.next_fire_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.next_fire_ms)
            self.now_ms = handle.next_fire_ms
            handle.next_fire_ms += handle.interval_ms
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired
