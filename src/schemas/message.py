"""Message Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Schema for sending a message. The sender is always the caller."""

    model_config = ConfigDict(from_attributes=True)

    receiver_id: int = Field(..., gt=0, description="Recipient user id")
    content: str = Field(..., min_length=1, max_length=10000, description="Message content")
    job_id: int | None = Field(default=None, gt=0, description="Related job, if any")


class MessageResponse(BaseModel):
    """Schema for message API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Message id")
    sender_id: int = Field(description="Sender user id")
    receiver_id: int = Field(description="Receiver user id")
    job_id: int | None = Field(default=None, description="Related job id")
    content: str = Field(description="Message content")
    read: bool = Field(default=False, description="Whether the receiver has read it")
    created_at: datetime = Field(description="Creation timestamp")


class ConversationSummary(BaseModel):
    """One entry per counterpart, derived from the caller's messages."""

    model_config = ConfigDict(from_attributes=True)

    counterpart_id: int = Field(description="The other participant")
    latest_message: MessageResponse = Field(description="Most recent message exchanged with the counterpart")
    unread_count: int = Field(default=0, description="Unread messages received from the counterpart")


class UnreadCountResponse(BaseModel):
    """Unread message count for the caller."""

    count: int = Field(description="Number of unread messages")
