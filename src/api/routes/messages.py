"""Direct message API routes."""

from fastapi import APIRouter, Query, status

from src.api.deps import CurrentAccount, MessagingAccount
from src.schemas.message import (
    ConversationSummary,
    MessageCreate,
    MessageResponse,
    UnreadCountResponse,
)
from src.services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get(
    "",
    response_model=list[MessageResponse],
    summary="List my messages",
    description="Every message the caller sent or received, newest first.",
)
async def list_messages(account: CurrentAccount) -> list[MessageResponse]:
    """List the caller's messages."""
    service = MessageService()
    messages = await service.list_for_user(account["id"])
    return [MessageResponse(**message) for message in messages]


@router.get(
    "/conversations",
    response_model=list[ConversationSummary],
    summary="List conversations",
    description="One entry per counterpart with the latest message and unread count, newest first.",
)
async def list_conversations(
    account: CurrentAccount,
    limit: int | None = Query(default=None, ge=1, le=100, description="Return only the N most recent"),
) -> list[ConversationSummary]:
    """List the caller's conversations."""
    service = MessageService()
    conversations = await service.list_conversations(account["id"], limit=limit)
    return [ConversationSummary(**conversation) for conversation in conversations]


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count unread messages",
)
async def unread_count(account: CurrentAccount) -> UnreadCountResponse:
    """Count unread messages addressed to the caller."""
    service = MessageService()
    return UnreadCountResponse(count=await service.unread_count(account["id"]))


@router.get(
    "/{counterpart_id}",
    response_model=list[MessageResponse],
    summary="Get a conversation thread",
    description="Messages exchanged with one counterpart, oldest first.",
)
async def get_thread(counterpart_id: int, account: CurrentAccount) -> list[MessageResponse]:
    """Get the thread between the caller and a counterpart."""
    service = MessageService()
    messages = await service.get_thread(account["id"], counterpart_id)
    return [MessageResponse(**message) for message in messages]


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(data: MessageCreate, account: MessagingAccount) -> MessageResponse:
    """Send a message from the caller."""
    service = MessageService()
    message = await service.send(account["id"], data)
    return MessageResponse(**message)


@router.patch(
    "/{message_id}/read",
    response_model=MessageResponse,
    summary="Mark a message read",
    description="Only the receiver may mark a message read.",
)
async def mark_read(message_id: int, account: CurrentAccount) -> MessageResponse:
    """Mark a received message read."""
    service = MessageService()
    message = await service.mark_read(message_id, account["id"])
    return MessageResponse(**message)
