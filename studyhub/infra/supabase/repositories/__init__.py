"""Repository factory and exports"""
from supabase import Client  # type: ignore
from .study_sessions import StudySessionRepository
from .push_notifications import PushNotificationRepository


class RepositoryFactory:
    """Factory for creating repository instances"""
    
    def __init__(self, client: Client):
        self._client = client
        self._study_sessions: StudySessionRepository = None
        self._push_notifications: PushNotificationRepository = None
    
    @property
    def study_sessions(self) -> StudySessionRepository:
        """Get study sessions repository"""
        if self._study_sessions is None:
            self._study_sessions = StudySessionRepository(self._client)
        return self._study_sessions
    
    @property
    def push_notifications(self) -> PushNotificationRepository:
        """Get push notifications repository"""
        if self._push_notifications is None:
            self._push_notifications = PushNotificationRepository(self._client)
        return self._push_notifications


__all__ = [
    'RepositoryFactory',
    'StudySessionRepository',
    'PushNotificationRepository',
]
