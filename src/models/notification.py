"""Notification model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class NotificationType(str, Enum):
    """Notification severity values."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(TypedDict):
    """Notifications table row representation."""

    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    read: bool
    link: str | None
    created_at: datetime
