"""Notification API routes."""

from fastapi import APIRouter, Query, status

from src.api.deps import CurrentAccount, account_role
from src.api.middleware.error_handler import AuthorizationError
from src.core.permissions import Capability, has_capability
from src.schemas.notification import MarkAllReadResponse, NotificationCreate, NotificationResponse
from src.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse], summary="List my notifications")
async def list_notifications(
    account: CurrentAccount,
    unread: bool = Query(default=False, description="Only unread notifications"),
) -> list[NotificationResponse]:
    """List the caller's notifications, newest first."""
    service = NotificationService()
    notifications = await service.list_for_user(account["id"], unread_only=unread)
    return [NotificationResponse(**notification) for notification in notifications]


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification",
    description="Anyone may notify themselves; staff may notify any user.",
)
async def create_notification(data: NotificationCreate, account: CurrentAccount) -> NotificationResponse:
    """Create a notification for the caller or, for staff, another user."""
    recipient = data.user_id or account["id"]
    if recipient != account["id"] and not has_capability(account_role(account), Capability.NOTIFY_USERS):
        raise AuthorizationError("Not authorized to notify other users")

    service = NotificationService()
    notification = await service.create(recipient, data.title, data.message, data.type, link=data.link)
    return NotificationResponse(**notification)


@router.patch("/read-all", response_model=MarkAllReadResponse, summary="Mark all notifications read")
async def mark_all_read(account: CurrentAccount) -> MarkAllReadResponse:
    """Mark every unread notification of the caller read."""
    service = NotificationService()
    updated = await service.mark_all_read(account["id"])
    return MarkAllReadResponse(updated=updated)


@router.patch("/{notification_id}/read", response_model=NotificationResponse, summary="Mark a notification read")
async def mark_read(notification_id: int, account: CurrentAccount) -> NotificationResponse:
    """Mark one of the caller's notifications read."""
    service = NotificationService()
    notification = await service.mark_read(notification_id, account["id"])
    return NotificationResponse(**notification)
