"""
Notification Dispatcher

Plays a completion tone and sends a system notification when a phase ends.
Both channels are optional and fail independently without raising.
"""
import logging
from enum import Enum
from typing import Callable, Optional, Protocol

from studyhub.infra.supabase.repositories.push_notifications import PushNotificationRepository
from studyhub.models.push_notification import PushNotificationCreate, PushNotificationStatus

from .constants import NOTIFICATION_TITLE
from .errors import AudioUnavailable, PermissionDenied
from .models.timer_state import SessionPhase, ToneSpec

logger = logging.getLogger(__name__)

ToneSink = Callable[[ToneSpec], None]


class NotificationPermission(str, Enum):
    """Browser notification permission"""
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


class PermissionProvider(Protocol):
    def query(self) -> NotificationPermission: ...

    async def request(self) -> NotificationPermission: ...


class SystemNotifier(Protocol):
    async def send(self, title: str, body: str) -> None: ...


class ClientReportedPermission:
    """
    Permission state as last reported by the browser of one page view.

    The prompt itself happens client side: `request` signals the client
    through `on_request` and answers with the state known so far.
    """

    def __init__(
        self,
        state: NotificationPermission = NotificationPermission.DEFAULT,
        on_request: Optional[Callable[[], None]] = None,
    ):
        self._state = state
        self._on_request = on_request

    def query(self) -> NotificationPermission:
        return self._state

    def update(self, state: NotificationPermission):
        self._state = NotificationPermission(state)

    async def request(self) -> NotificationPermission:
        if self._state is NotificationPermission.DEFAULT and self._on_request is not None:
            self._on_request()
        return self._state


class SupabasePushNotifier:
    """Queues a push_notifications row; delivery is handled by the database webhook"""

    def __init__(self, repository: PushNotificationRepository, user_id: str):
        self._repository = repository
        self._user_id = user_id

    async def send(self, title: str, body: str) -> None:
        await self._repository.create(
            PushNotificationCreate(
                user_id=self._user_id,
                title=title,
                body=body,
                data={"source": "study_timer"},
                status=PushNotificationStatus.PENDING,
            )
        )


def completion_message(phase: SessionPhase) -> str:
    return f"{'Break' if phase.is_break else 'Work'} session completed!"


class NotificationDispatcher:
    """Best-effort phase completion notifications"""

    def __init__(
        self,
        tone_sink: Optional[ToneSink] = None,
        notifier: Optional[SystemNotifier] = None,
        permissions: Optional[PermissionProvider] = None,
        tone: ToneSpec = ToneSpec(),
    ):
        self._tone_sink = tone_sink
        self._notifier = notifier
        self._permissions = permissions
        self._tone = tone

    async def notify_phase_complete(self, phase: SessionPhase) -> None:
        try:
            self._play_tone()
        except AudioUnavailable as e:
            logger.debug(f"Skipping completion tone: {e}")
        except Exception as e:
            logger.warning(f"Completion tone failed: {e}")

        try:
            await self._send_system_notification(phase)
        except PermissionDenied as e:
            logger.debug(f"Skipping system notification: {e}")
        except Exception as e:
            logger.warning(f"System notification failed: {e}")

    def _play_tone(self):
        if self._tone_sink is None:
            raise AudioUnavailable("no audio output attached")
        self._tone_sink(self._tone)

    async def _send_system_notification(self, phase: SessionPhase):
        if self._notifier is None or self._permissions is None:
            logger.debug("No system notifier configured")
            return

        permission = self._permissions.query()
        if permission is NotificationPermission.DEFAULT:
            permission = await self._permissions.request()
        if permission is not NotificationPermission.GRANTED:
            raise PermissionDenied(f"notification permission is {permission.value}")

        await self._notifier.send(NOTIFICATION_TITLE, completion_message(phase))
