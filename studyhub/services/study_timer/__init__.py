"""Study timer - Pomodoro sessions with persistence and notifications"""
from .errors import (
    AudioUnavailable,
    DurationValidationError,
    InvalidTransitionError,
    PermissionDenied,
    StorageError,
    StudyTimerError,
    ViewNotFoundError,
)
from .models.timer_state import DurationConfig, SessionPhase, TimerSnapshot, TimerState, TimerStatus, ToneSpec
from .notifications import NotificationDispatcher, NotificationPermission
from .persistence import SessionPersistenceGateway, SupabaseSessionGateway
from .registry import TimerRegistry, TimerView
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .stats import StatsAggregator
from .timer_engine import StudyTimer

__all__ = [
    "AsyncioScheduler",
    "AudioUnavailable",
    "DurationConfig",
    "DurationValidationError",
    "InvalidTransitionError",
    "ManualScheduler",
    "NotificationDispatcher",
    "NotificationPermission",
    "PermissionDenied",
    "Scheduler",
    "SessionPersistenceGateway",
    "SessionPhase",
    "StatsAggregator",
    "StorageError",
    "StudyTimer",
    "StudyTimerError",
    "SupabaseSessionGateway",
    "TimerRegistry",
    "TimerSnapshot",
    "TimerState",
    "TimerStatus",
    "TimerView",
    "ToneSpec",
    "ViewNotFoundError",
]
