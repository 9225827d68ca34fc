"""Activity recording and feed service."""

import logging
from typing import Any

from src.core.supabase import get_supabase_client
from src.models.activity import ActivityType
from src.schemas.activity import ActivityResponse
from src.services.activity_feed import to_activity_response

logger = logging.getLogger(__name__)


class ActivityService:
    """Service for writing and reading the per-user activity feed."""

    DEFAULT_FEED_LIMIT = 10
    MAX_FEED_LIMIT = 100

    def __init__(self) -> None:
        """Initialize activity service with Supabase client."""
        self.client = get_supabase_client()

    async def record(
        self,
        user_id: int,
        activity_type: ActivityType,
        metadata: dict[str, Any],
    ) -> dict[str, Any]:
        """Append an activity to a user's feed.

        Args:
            user_id: Owner of the activity.
            activity_type: What happened.
            metadata: Variant fields for the activity type.

        Returns:
            dict: The created activities row.
        """
        response = (
            self.client.table("activities")
            .insert(
                {
                    "user_id": user_id,
                    "type": activity_type.value,
                    "metadata": metadata,
                }
            )
            .execute()
        )
        logger.debug("Recorded %s activity for user %s", activity_type.value, user_id)
        return response.data[0]

    async def list_for_user(self, user_id: int, limit: int | None = None) -> list[ActivityResponse]:
        """Get a user's most recent activities, newest first."""
        page_size = min(limit or self.DEFAULT_FEED_LIMIT, self.MAX_FEED_LIMIT)
        response = (
            self.client.table("activities")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(page_size)
            .execute()
        )
        return [to_activity_response(row, viewer_id=user_id) for row in response.data or []]
