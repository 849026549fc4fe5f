from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime


class PushNotificationStatus(str):
    """Push notification status constants"""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class PushNotificationBase(BaseModel):
    """Base push notification fields"""
    user_id: str  # UUID as string
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None


class PushNotificationCreate(PushNotificationBase):
    """Push notification creation model"""
    status: str = PushNotificationStatus.PENDING


class PushNotificationUpdate(BaseModel):
    """Push notification update model"""
    status: Optional[str] = None
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None


class PushNotification(PushNotificationBase):
    """Complete push notification model from database"""
    id: int
    status: str
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
