"""Stats Aggregator - today's study totals"""
import logging
from datetime import datetime
from typing import List, Optional

from studyhub.infra.supabase.repositories.study_sessions import StudySessionRepository
from studyhub.models.study_session import StudySession, TodayStats
from studyhub.utils.time_format import format_minutes, local_day_bounds

logger = logging.getLogger(__name__)

DEFAULT_DAILY_GOAL_MINUTES = 240


def goal_progress(total_minutes: int, goal_minutes: int = DEFAULT_DAILY_GOAL_MINUTES) -> float:
    """Percentage of the daily goal reached, capped at 100"""
    if goal_minutes <= 0:
        return 100.0
    return min(100.0, total_minutes / goal_minutes * 100)


class StatsAggregator:
    """Read-only view over persisted study sessions. Nothing is cached."""

    def __init__(self, repository: StudySessionRepository, daily_goal_minutes: int = DEFAULT_DAILY_GOAL_MINUTES):
        self._repository = repository
        self._daily_goal_minutes = daily_goal_minutes

    async def load_today_stats(self, user_id: str, now: Optional[datetime] = None) -> TodayStats:
        """
        Count and total the user's completed sessions for the local calendar day.

        Args:
            user_id: Owner of the sessions
            now: Reference time (defaults to the current local time)
        """
        start, end = local_day_bounds(now)
        sessions = await self._repository.find_completed_between(user_id, start, end)

        total_minutes = sum(session.duration_minutes for session in sessions)
        stats = TodayStats(
            session_count=len(sessions),
            total_minutes=total_minutes,
            goal_progress_percent=goal_progress(total_minutes, self._daily_goal_minutes),
            total_time_label=format_minutes(total_minutes),
        )
        logger.debug(f"Today stats for {user_id}: {stats.session_count} sessions, {total_minutes}min")
        return stats

    async def load_recent_sessions(self, user_id: str, limit: int = 5) -> List[StudySession]:
        return await self._repository.find_recent(user_id, limit=limit)
