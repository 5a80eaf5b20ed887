from enum import Enum

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    BOOKING_SUCCESS = "booking_success"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_COMPLETED = "booking_completed"
    REMINDER = "reminder"


class Notification(BaseModel):
    user_id: str = Field(..., min_length=1)
    type: NotificationType
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    related_type: str | None = None
    related_id: str | None = None
    action_url: str | None = None
