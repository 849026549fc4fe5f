"""Tests for the best-effort notification dispatcher."""

from studyhub.infra.supabase.repositories.push_notifications import PushNotificationRepository
from studyhub.services.study_timer.models.timer_state import SessionPhase, ToneSpec
from studyhub.services.study_timer.notifications import (
    ClientReportedPermission,
    NotificationDispatcher,
    NotificationPermission,
    SupabasePushNotifier,
    completion_message,
)


class RecordingNotifier:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def send(self, title, body):
        if self.error is not None:
            raise self.error
        self.sent.append((title, body))


def test_completion_messages():
    assert completion_message(SessionPhase.WORK) == "Work session completed!"
    assert completion_message(SessionPhase.SHORT_BREAK) == "Break session completed!"
    assert completion_message(SessionPhase.LONG_BREAK) == "Break session completed!"


async def test_tone_is_played():
    tones = []
    dispatcher = NotificationDispatcher(tone_sink=tones.append)

    await dispatcher.notify_phase_complete(SessionPhase.WORK)

    assert tones == [ToneSpec()]
    assert tones[0].start_frequency_hz == 800
    assert tones[0].end_frequency_hz == 400


async def test_no_audio_and_no_notifier_is_silent():
    await NotificationDispatcher().notify_phase_complete(SessionPhase.WORK)


async def test_granted_permission_sends_notification():
    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(
        notifier=notifier,
        permissions=ClientReportedPermission(NotificationPermission.GRANTED),
    )

    await dispatcher.notify_phase_complete(SessionPhase.SHORT_BREAK)

    assert notifier.sent == [("StudyHub Timer", "Break session completed!")]


async def test_denied_permission_skips_channel_but_plays_tone():
    tones = []
    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(
        tone_sink=tones.append,
        notifier=notifier,
        permissions=ClientReportedPermission(NotificationPermission.DENIED),
    )

    await dispatcher.notify_phase_complete(SessionPhase.WORK)

    assert notifier.sent == []
    assert len(tones) == 1


async def test_default_permission_requests_and_skips():
    requests = []
    notifier = RecordingNotifier()
    permissions = ClientReportedPermission(on_request=lambda: requests.append(1))
    dispatcher = NotificationDispatcher(notifier=notifier, permissions=permissions)

    await dispatcher.notify_phase_complete(SessionPhase.WORK)

    assert requests == [1]
    assert notifier.sent == []

    permissions.update(NotificationPermission.GRANTED)
    await dispatcher.notify_phase_complete(SessionPhase.WORK)
    assert notifier.sent == [("StudyHub Timer", "Work session completed!")]
    assert requests == [1]


async def test_channel_failures_are_independent():
    def broken_sink(_):
        raise OSError("no audio device")

    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(
        tone_sink=broken_sink,
        notifier=notifier,
        permissions=ClientReportedPermission(NotificationPermission.GRANTED),
    )
    await dispatcher.notify_phase_complete(SessionPhase.WORK)
    assert len(notifier.sent) == 1

    failing = NotificationDispatcher(
        notifier=RecordingNotifier(error=RuntimeError("push down")),
        permissions=ClientReportedPermission(NotificationPermission.GRANTED),
    )
    await failing.notify_phase_complete(SessionPhase.WORK)


async def test_supabase_notifier_queues_push_row(supabase_client):
    notifier = SupabasePushNotifier(PushNotificationRepository(supabase_client), "user-1")

    await notifier.send("StudyHub Timer", "Work session completed!")

    rows = supabase_client.tables["push_notifications"].rows
    assert len(rows) == 1
    assert rows[0]["user_id"] == "user-1"
    assert rows[0]["body"] == "Work session completed!"
    assert rows[0]["status"] == "pending"
