"""Session Persistence Gateway - records completed work sessions"""
import logging
from datetime import datetime
from typing import Protocol

from studyhub.infra.supabase.repositories.study_sessions import StudySessionRepository
from studyhub.models.study_session import StudySession, StudySessionCreate

from .constants import SESSION_TYPE_POMODORO
from .errors import StorageError

logger = logging.getLogger(__name__)


class SessionPersistenceGateway(Protocol):
    async def record_completed_session(
        self,
        user_id: str,
        duration_minutes: int,
        started_at: datetime,
        completed_at: datetime,
    ) -> None: ...


class SupabaseSessionGateway:
    """Writes completed pomodoros into the study_sessions table"""

    def __init__(self, repository: StudySessionRepository):
        self._repository = repository

    async def record_completed_session(
        self,
        user_id: str,
        duration_minutes: int,
        started_at: datetime,
        completed_at: datetime,
    ) -> StudySession:
        """
        Insert one completed session row.

        Raises:
            StorageError: on any transport, auth or insert failure
        """
        record = StudySessionCreate(
            user_id=user_id,
            session_type=SESSION_TYPE_POMODORO,
            duration_minutes=duration_minutes,
            completed=True,
            started_at=started_at,
            completed_at=completed_at,
        )
        try:
            created = await self._repository.create(record)
        except Exception as e:
            raise StorageError(f"Failed to save study session: {e}") from e

        logger.info(f"Study session {created.id} saved for user {user_id}: {duration_minutes}min")
        return created
