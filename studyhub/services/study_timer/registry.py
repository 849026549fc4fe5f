"""Timer registry - one StudyTimer per open page view"""
import asyncio
import json
import logging
import uuid
from typing import AsyncIterator, Callable, Dict, Optional, Set

from .errors import ViewNotFoundError
from .models.timer_state import DurationConfig, TimerSnapshot, ToneSpec
from .notifications import ClientReportedPermission, NotificationDispatcher, SystemNotifier
from .persistence import SessionPersistenceGateway
from .scheduler import AsyncioScheduler, Scheduler
from .timer_engine import StudyTimer

logger = logging.getLogger(__name__)

_CLOSED = object()


class TimerView:
    """A page view: its timer plus the event stream the browser listens to"""

    def __init__(
        self,
        view_id: str,
        user_id: str,
        on_abandoned: Optional[Callable[["TimerView"], None]] = None,
    ):
        self.view_id = view_id
        self.user_id = user_id
        self._on_abandoned = on_abandoned
        self._closed = False
        self.permission = ClientReportedPermission(on_request=self._on_permission_request)
        self.timer: Optional[StudyTimer] = None
        self._queues: Set[asyncio.Queue] = set()

    def attach(self, timer: StudyTimer):
        self.timer = timer
        timer.subscribe(self._on_snapshot)

    def publish(self, event: str, payload: dict):
        for queue in list(self._queues):
            queue.put_nowait((event, payload))

    def _on_snapshot(self, snapshot: TimerSnapshot):
        self.publish("snapshot", snapshot.model_dump(mode="json"))

    def on_tone(self, tone: ToneSpec):
        self.publish("tone", tone.model_dump(mode="json"))

    def _on_permission_request(self):
        self.publish("permission-request", {"view_id": self.view_id})

    async def events(self) -> AsyncIterator[str]:
        """Server-sent events until the view is closed"""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.add(queue)
        try:
            if self.timer is not None:
                yield _format_event("snapshot", self.timer.snapshot().model_dump(mode="json"))
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    break
                event, payload = item
                yield _format_event(event, payload)
        finally:
            self._queues.discard(queue)
            if not self._queues and not self._closed and self._on_abandoned is not None:
                self._on_abandoned(self)

    def close(self):
        self._closed = True
        for queue in list(self._queues):
            queue.put_nowait(_CLOSED)


def _format_event(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


class TimerRegistry:
    """Creates, looks up and tears down page-view timers"""

    def __init__(
        self,
        scheduler_factory: Callable[[], Scheduler] = AsyncioScheduler,
        gateway: Optional[SessionPersistenceGateway] = None,
        notifier_factory: Optional[Callable[[str], SystemNotifier]] = None,
    ):
        self._scheduler_factory = scheduler_factory
        self._gateway = gateway
        self._notifier_factory = notifier_factory
        self._views: Dict[str, TimerView] = {}

    def __len__(self) -> int:
        return len(self._views)

    def create(self, user_id: str, durations: Optional[DurationConfig] = None) -> TimerView:
        view = TimerView(str(uuid.uuid4()), user_id, on_abandoned=self._abandon)
        notifier = self._notifier_factory(user_id) if self._notifier_factory else None
        dispatcher = NotificationDispatcher(
            tone_sink=view.on_tone,
            notifier=notifier,
            permissions=view.permission,
        )
        view.attach(
            StudyTimer(
                user_id,
                self._scheduler_factory(),
                gateway=self._gateway,
                dispatcher=dispatcher,
                durations=durations,
            )
        )
        self._views[view.view_id] = view
        logger.info(f"Timer view {view.view_id} opened for user {user_id}")
        return view

    def get(self, view_id: str, user_id: str) -> TimerView:
        """
        Raises:
            ViewNotFoundError: unknown view, or a view owned by someone else
        """
        view = self._views.get(view_id)
        if view is None or view.user_id != user_id:
            raise ViewNotFoundError(view_id)
        return view

    async def close(self, view_id: str, user_id: str):
        view = self.get(view_id, user_id)
        del self._views[view_id]
        await self._teardown(view)

    async def close_all(self):
        views = list(self._views.values())
        self._views.clear()
        for view in views:
            await self._teardown(view)

    async def _teardown(self, view: TimerView):
        view.timer.dispose()
        view.close()
        await view.timer.drain()
        logger.info(f"Timer view {view.view_id} closed")

    def _abandon(self, view: TimerView):
        """Last event stream of the view disconnected without a close"""
        if self._views.pop(view.view_id, None) is None:
            return
        view.timer.dispose()
        logger.info(f"Timer view {view.view_id} abandoned by its client")
