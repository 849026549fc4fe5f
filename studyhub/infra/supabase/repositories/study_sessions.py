"""Study sessions repository"""
from datetime import datetime
from typing import List

from supabase import Client  # type: ignore

from studyhub.models.study_session import (
    StudySession,
    StudySessionCreate,
    StudySessionUpdate,
)

from .base import BaseRepository


class StudySessionRepository(BaseRepository[StudySession, StudySessionCreate, StudySessionUpdate]):
    """Repository for study_sessions operations. Every query is scoped by user_id."""
    
    def __init__(self, client: Client):
        super().__init__(client, "study_sessions", StudySession)
    
    async def find_completed_between(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> List[StudySession]:
        """
        Completed sessions of a user whose completed_at falls in [start, end)
        
        Args:
            user_id: Owner of the sessions
            start: Inclusive lower bound (timezone aware)
            end: Exclusive upper bound (timezone aware)
        """
        response = (
            self._client.table(self._table_name)
            .select("*")
            .eq("user_id", user_id)
            .eq("completed", True)
            .gte("completed_at", start.isoformat())
            .lt("completed_at", end.isoformat())
            .execute()
        )
        return self._to_models(response.data)
    
    async def find_recent(self, user_id: str, limit: int = 5) -> List[StudySession]:
        """Latest sessions of a user, newest first"""
        return await self.find_by_filters(
            {"user_id": user_id},
            order_by="started_at",
            desc=True,
            limit=limit,
        )
    
    async def count_completed(self, user_id: str) -> int:
        """Number of completed sessions ever recorded for a user"""
        return await self.count({"user_id": user_id, "completed": True})
