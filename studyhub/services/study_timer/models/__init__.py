from .timer_state import (
    DurationConfig,
    SessionPhase,
    TimerSnapshot,
    TimerState,
    TimerStatus,
    ToneSpec,
)

__all__ = [
    "DurationConfig",
    "SessionPhase",
    "TimerSnapshot",
    "TimerState",
    "TimerStatus",
    "ToneSpec",
]
