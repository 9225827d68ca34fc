"""Review business logic service."""

import logging
from typing import Any

from src.api.middleware.error_handler import AuthorizationError, BadRequestError
from src.core.supabase import get_supabase_client
from src.models.activity import ActivityType
from src.models.notification import NotificationType
from src.schemas.review import ReviewCreate
from src.services.activity_service import ActivityService
from src.services.contract_service import ContractService
from src.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class ReviewService:
    """Service for contract reviews."""

    def __init__(self) -> None:
        """Initialize review service with Supabase client."""
        self.client = get_supabase_client()
        self.contracts = ContractService()
        self.activities = ActivityService()
        self.notifications = NotificationService()

    async def list_received(self, user_id: int) -> list[dict[str, Any]]:
        """Reviews a user has received, newest first."""
        response = (
            self.client.table("reviews")
            .select("*")
            .eq("receiver_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    async def submit(self, reviewer_id: int, data: ReviewCreate) -> dict[str, Any]:
        """Review the other party on a contract.

        The review lands in the receiver's activity feed.

        Raises:
            NotFoundError: If the contract does not exist.
            AuthorizationError: If the caller is not a party to the contract.
            BadRequestError: If the caller already reviewed this contract.
        """
        contract = await self.contracts.require_contract(data.contract_id)

        if reviewer_id == contract["client_id"]:
            receiver_id = contract["freelancer_id"]
        elif reviewer_id == contract["freelancer_id"]:
            receiver_id = contract["client_id"]
        else:
            raise AuthorizationError("Not authorized to review this contract")

        existing = (
            self.client.table("reviews")
            .select("id")
            .eq("contract_id", contract["id"])
            .eq("reviewer_id", reviewer_id)
            .execute()
        )
        if existing.data:
            raise BadRequestError("You have already reviewed this contract")

        row = data.model_dump(mode="json")
        row["reviewer_id"] = reviewer_id
        row["receiver_id"] = receiver_id

        response = self.client.table("reviews").insert(row).execute()
        review = response.data[0]
        logger.info("User %s reviewed user %s on contract %s", reviewer_id, receiver_id, contract["id"])

        await self.activities.record(
            receiver_id,
            ActivityType.REVIEW_SUBMITTED,
            {"review_id": review["id"], "contract_id": contract["id"], "rating": review["rating"]},
        )
        await self.notifications.create(
            receiver_id,
            "New review",
            f"You received a {review['rating']}-star review",
            NotificationType.INFO,
            link=f"/profile/{receiver_id}",
        )
        return review
