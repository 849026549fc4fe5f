"""Push notifications repository"""
from supabase import Client  # type: ignore

from studyhub.models.push_notification import (
    PushNotification,
    PushNotificationCreate,
    PushNotificationUpdate,
)

from .base import BaseRepository


class PushNotificationRepository(BaseRepository[PushNotification, PushNotificationCreate, PushNotificationUpdate]):
    """Repository for push_notifications rows consumed by the delivery webhook"""
    
    def __init__(self, client: Client):
        super().__init__(client, "push_notifications", PushNotification)
