"""Message model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict


class Message(TypedDict):
    """Messages table row representation.

    Rows are immutable except ``read``, which only the receiver flips
    from false to true.
    """

    id: int
    sender_id: int
    receiver_id: int
    job_id: int | None
    content: str
    read: bool
    created_at: datetime


class MessageCreate(TypedDict, total=False):
    """Data required to create a new message."""

    sender_id: int
    receiver_id: int
    job_id: int | None
    content: str
    read: bool
