"""Notification Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.notification import NotificationType


class NotificationCreate(BaseModel):
    """Schema for creating a notification.

    ``user_id`` defaults to the caller. Only staff may address other users.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: int | None = Field(default=None, gt=0, description="Recipient; defaults to the caller")
    title: str = Field(..., min_length=1, max_length=200, description="Headline")
    message: str = Field(..., min_length=1, max_length=2000, description="Body text")
    type: NotificationType = Field(default=NotificationType.INFO, description="Severity")
    link: str | None = Field(default=None, max_length=1000, description="Where the notification points")


class NotificationResponse(BaseModel):
    """Schema for notification API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    read: bool
    link: str | None = None
    created_at: datetime


class MarkAllReadResponse(BaseModel):
    """Result of marking every notification read."""

    success: bool = True
    updated: int = Field(description="Notifications that changed from unread to read")
