"""Activity feed API routes."""

from fastapi import APIRouter, Query

from src.api.deps import CurrentAccount
from src.schemas.activity import ActivityResponse
from src.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get(
    "",
    response_model=list[ActivityResponse],
    summary="Recent activity",
    description="The caller's most recent activities, newest first, with display text.",
)
async def list_activities(
    account: CurrentAccount,
    limit: int = Query(default=10, ge=1, le=100),
) -> list[ActivityResponse]:
    """List the caller's recent activities."""
    service = ActivityService()
    return await service.list_for_user(account["id"], limit=limit)
