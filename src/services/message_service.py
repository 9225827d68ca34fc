"""Direct message business logic service."""

import logging
from typing import Any

from src.api.middleware.error_handler import AuthorizationError, NotFoundError
from src.core.supabase import get_supabase_client
from src.models.activity import ActivityType
from src.schemas.message import MessageCreate
from src.services.activity_service import ActivityService
from src.services.conversation_aggregator import aggregate_conversations
from src.services.user_service import UserService

logger = logging.getLogger(__name__)


class MessageService:
    """Service for sending, reading and grouping direct messages."""

    def __init__(self) -> None:
        """Initialize message service with Supabase client."""
        self.client = get_supabase_client()
        self.users = UserService()
        self.activities = ActivityService()

    async def list_for_user(self, user_id: int) -> list[dict[str, Any]]:
        """Every message the user sent or received, newest first."""
        response = (
            self.client.table("messages")
            .select("*")
            .or_(f"sender_id.eq.{user_id},receiver_id.eq.{user_id}")
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    async def get_thread(self, user_id: int, counterpart_id: int) -> list[dict[str, Any]]:
        """Messages exchanged between two users, oldest first."""
        response = (
            self.client.table("messages")
            .select("*")
            .or_(
                f"and(sender_id.eq.{user_id},receiver_id.eq.{counterpart_id}),"
                f"and(sender_id.eq.{counterpart_id},receiver_id.eq.{user_id})"
            )
            .order("created_at")
            .execute()
        )
        return response.data or []

    async def list_conversations(self, user_id: int, limit: int | None = None) -> list[dict[str, Any]]:
        """One entry per counterpart with the latest message, newest first."""
        messages = await self.list_for_user(user_id)
        return aggregate_conversations(messages, user_id, limit=limit)

    async def unread_count(self, user_id: int) -> int:
        """Number of unread messages addressed to the user."""
        response = (
            self.client.table("messages")
            .select("id", count="exact")
            .eq("receiver_id", user_id)
            .eq("read", False)
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    async def send(self, sender_id: int, data: MessageCreate) -> dict[str, Any]:
        """Send a message and record it in the sender's feed.

        Raises:
            NotFoundError: If the receiver does not exist.
        """
        if not await self.users.get_user(data.receiver_id):
            raise NotFoundError("Recipient not found")

        row = {
            "sender_id": sender_id,
            "receiver_id": data.receiver_id,
            "job_id": data.job_id,
            "content": data.content,
            "read": False,
        }
        response = self.client.table("messages").insert(row).execute()
        message = response.data[0]
        logger.info("User %s sent message %s to %s", sender_id, message["id"], data.receiver_id)

        await self.activities.record(
            sender_id,
            ActivityType.MESSAGE_SENT,
            {
                "message_id": message["id"],
                "sender_id": sender_id,
                "receiver_id": data.receiver_id,
                "job_id": data.job_id,
            },
        )
        return message

    async def mark_read(self, message_id: int, user_id: int) -> dict[str, Any]:
        """Mark a message read. Only its receiver may do so.

        Raises:
            NotFoundError: If the message does not exist.
            AuthorizationError: If the caller is not the receiver.
        """
        response = (
            self.client.table("messages")
            .select("*")
            .eq("id", message_id)
            .maybe_single()
            .execute()
        )
        message = response.data if response and response.data else None
        if not message:
            raise NotFoundError("Message not found")
        if message["receiver_id"] != user_id:
            raise AuthorizationError("Not authorized to update this message")
        if message.get("read"):
            return message

        updated = self.client.table("messages").update({"read": True}).eq("id", message_id).execute()
        return updated.data[0]
