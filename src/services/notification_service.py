"""Notification business logic service."""

import logging
from typing import Any

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.models.notification import NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for per-user notifications."""

    def __init__(self) -> None:
        """Initialize notification service with Supabase client."""
        self.client = get_supabase_client()

    async def list_for_user(self, user_id: int, unread_only: bool = False) -> list[dict[str, Any]]:
        """A user's notifications, newest first."""
        query = self.client.table("notifications").select("*").eq("user_id", user_id)
        if unread_only:
            query = query.eq("read", False)
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def create(
        self,
        user_id: int,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        link: str | None = None,
    ) -> dict[str, Any]:
        """Create an unread notification.

        Returns:
            dict: The created notifications row.
        """
        row = {
            "user_id": user_id,
            "title": title,
            "message": message,
            "type": NotificationType(notification_type).value,
            "read": False,
            "link": link,
        }
        response = self.client.table("notifications").insert(row).execute()
        notification = response.data[0]
        logger.debug("Notified user %s: %s", user_id, title)
        return notification

    async def mark_read(self, notification_id: int, user_id: int) -> dict[str, Any]:
        """Mark one of the user's notifications read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to someone else.
        """
        response = (
            self.client.table("notifications")
            .update({"read": True})
            .eq("id", notification_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not response.data:
            raise NotFoundError("Notification not found")
        return response.data[0]

    async def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of a user read.

        Returns:
            int: Number of notifications updated.
        """
        response = (
            self.client.table("notifications")
            .update({"read": True})
            .eq("user_id", user_id)
            .eq("read", False)
            .execute()
        )
        updated = len(response.data or [])
        logger.info("Marked %d notifications read for user %s", updated, user_id)
        return updated
