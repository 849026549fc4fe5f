"""Timer state models"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from ..constants import (
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    LONG_BREAK_MINUTES_RANGE,
    SHORT_BREAK_MINUTES_RANGE,
    WORK_MINUTES_RANGE,
)
from ..errors import DurationValidationError


class SessionPhase(str, Enum):
    """Pomodoro phase"""
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]

    @property
    def is_break(self) -> bool:
        return self is not SessionPhase.WORK


_PHASE_LABELS = {
    SessionPhase.WORK: "Work Session",
    SessionPhase.SHORT_BREAK: "Short Break",
    SessionPhase.LONG_BREAK: "Long Break",
}


class TimerStatus(str, Enum):
    """Timer status"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


def _validate_minutes(field: str, value, bounds: tuple) -> int:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DurationValidationError(field, f"{field} must be a whole number of minutes")
    if isinstance(value, float):
        if not value.is_integer():
            raise DurationValidationError(field, f"{field} must be a whole number of minutes")
        value = int(value)
    if not low <= value <= high:
        raise DurationValidationError(
            field, f"{field} must be between {low} and {high} minutes"
        )
    return value


class DurationConfig(BaseModel):
    """Configured phase durations, in whole seconds"""
    model_config = ConfigDict(frozen=True)

    work_seconds: int = Field(default=DEFAULT_WORK_MINUTES * 60, gt=0)
    short_break_seconds: int = Field(default=DEFAULT_SHORT_BREAK_MINUTES * 60, gt=0)
    long_break_seconds: int = Field(default=DEFAULT_LONG_BREAK_MINUTES * 60, gt=0)

    @classmethod
    def from_minutes(cls, work, short_break, long_break) -> "DurationConfig":
        """
        Build a config from minute values entered by the user.
        
        Raises:
            DurationValidationError: if any value is not an integer or is out of range
        """
        work = _validate_minutes("Work duration", work, WORK_MINUTES_RANGE)
        short_break = _validate_minutes("Short break", short_break, SHORT_BREAK_MINUTES_RANGE)
        long_break = _validate_minutes("Long break", long_break, LONG_BREAK_MINUTES_RANGE)
        return cls(
            work_seconds=work * 60,
            short_break_seconds=short_break * 60,
            long_break_seconds=long_break * 60,
        )

    def seconds_for(self, phase: SessionPhase) -> int:
        if phase is SessionPhase.WORK:
            return self.work_seconds
        if phase is SessionPhase.SHORT_BREAK:
            return self.short_break_seconds
        return self.long_break_seconds

    @property
    def work_minutes(self) -> int:
        return self.work_seconds // 60


class TimerState(BaseModel):
    """Mutable state of one page view's timer"""
    phase: SessionPhase = SessionPhase.WORK
    remaining_seconds: int = Field(default=DEFAULT_WORK_MINUTES * 60, ge=0)
    status: TimerStatus = TimerStatus.IDLE
    completed_work_sessions: int = Field(default=0, ge=0)
    phase_started_at: Optional[datetime] = None


class TimerSnapshot(BaseModel):
    """Immutable view of the timer handed to the presentation layer"""
    model_config = ConfigDict(frozen=True)

    phase: SessionPhase
    phase_label: str
    remaining_seconds: int
    status: TimerStatus
    completed_work_sessions: int
    phase_started_at: Optional[datetime] = None
    display: str
    title: str
    button_label: str
    durations: DurationConfig
    notice: Optional[str] = None


class ToneSpec(BaseModel):
    """Short synthesized beep played on phase completion"""
    model_config = ConfigDict(frozen=True)

    start_frequency_hz: float = 800
    end_frequency_hz: float = 400
    start_gain: float = 0.3
    end_gain: float = 0.01
    duration_seconds: float = 0.1
