"""Support ticket model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class TicketType(str, Enum):
    """Ticket categories."""

    SUPPORT = "support"
    COMPLAINT = "complaint"
    BUG = "bug"
    FEATURE = "feature"
    OTHER = "other"


class TicketPriority(str, Enum):
    """Ticket priority values."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStatus(str, Enum):
    """Ticket workflow status values."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SupportTicket(TypedDict):
    """Support tickets table row representation."""

    id: int
    user_id: int
    title: str
    description: str
    type: TicketType
    priority: TicketPriority
    status: TicketStatus
    job_id: int | None
    contract_id: int | None
    assigned_to_id: int | None
    created_at: datetime
    updated_at: datetime | None
    resolved_at: datetime | None
