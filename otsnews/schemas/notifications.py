"""
Notification and digest preference schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from otsnews.kernel.models.notification import DigestFrequency, NotificationType


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: NotificationType
    message: str
    article_id: Optional[uuid.UUID] = None
    timestamp: datetime
    read: bool
    
    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    """A user's notifications, newest first."""
    
    items: List[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int


class DigestPreferenceResponse(BaseModel):
    user_id: uuid.UUID
    enabled: bool
    frequency: DigestFrequency
    
    class Config:
        from_attributes = True


class DigestPreferenceUpdate(BaseModel):
    enabled: bool
    frequency: DigestFrequency = DigestFrequency.WEEKLY
