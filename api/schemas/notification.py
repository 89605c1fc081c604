"""
Notification Schemas
Pydantic models for the notification debug view
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel


class ScheduledNotificationResponse(BaseModel):
    """A pending notification"""
    key: str
    title: str
    body: str
    data: Dict[str, Any]
    trigger: Optional[datetime] = None


class ScheduledNotificationList(BaseModel):
    """Pending notifications"""
    notifications: List[ScheduledNotificationResponse]
    total: int
