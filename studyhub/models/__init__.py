"""Domain models for the application"""
from .study_session import StudySession, StudySessionCreate, StudySessionUpdate, TodayStats
from .push_notification import PushNotification, PushNotificationCreate, PushNotificationUpdate, PushNotificationStatus

__all__ = [
    'StudySession', 'StudySessionCreate', 'StudySessionUpdate', 'TodayStats',
    'PushNotification', 'PushNotificationCreate', 'PushNotificationUpdate', 'PushNotificationStatus',
]
