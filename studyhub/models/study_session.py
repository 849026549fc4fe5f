"""Study session domain model"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class StudySessionBase(BaseModel):
    """Base study session fields"""
    user_id: str  # UUID as string
    session_type: str = "pomodoro"
    duration_minutes: int = Field(ge=0)
    completed: bool = True
    started_at: datetime
    completed_at: Optional[datetime] = None


class StudySessionCreate(StudySessionBase):
    """Study session creation model"""
    pass


class StudySessionUpdate(BaseModel):
    """Study session update model - all fields optional"""
    duration_minutes: Optional[int] = None
    completed: Optional[bool] = None
    completed_at: Optional[datetime] = None


class StudySession(StudySessionBase):
    """Complete study session model from database"""
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TodayStats(BaseModel):
    """Aggregated study statistics for the current day"""
    session_count: int = 0
    total_minutes: int = 0
    goal_progress_percent: float = 0
    total_time_label: str = "0m"
