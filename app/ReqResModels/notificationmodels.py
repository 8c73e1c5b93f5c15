from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, List
from enum import Enum

class NotificationType(str, Enum):
    BOOKING_SUBMITTED = "booking_submitted"
    BOOKING_STAGE_APPROVED = "booking_stage_approved"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_DECLINED = "booking_declined"
    ACCOUNT_APPROVAL = "account_approval"
    ROLE_ASSIGNMENT = "role_assignment"

# Notification types after which clients must refetch their roles and profile
INVALIDATING_TYPES = frozenset({NotificationType.ROLE_ASSIGNMENT.value, NotificationType.ACCOUNT_APPROVAL.value})

# Response Models
class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    message: str
    type: str
    is_read: bool
    action_url: Optional[str] = None
    created_at: datetime

class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread: int

class UnreadCountResponse(BaseModel):
    unread: int

class FeedEvent(BaseModel):
    notification: NotificationResponse
    invalidate: List[str] = []

class NotificationFeedResponse(BaseModel):
    events: List[FeedEvent]
    last_id: int
    unread: int

class NotificationErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[dict] = None
