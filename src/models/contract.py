"""Contract and payment model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class ContractStatus(str, Enum):
    """Contract status values matching database enum."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"


class PaymentStatus(str, Enum):
    """Payment status values. Funded payments sit in escrow as "held"."""

    PENDING = "pending"
    HELD = "held"
    RELEASED = "released"
    REFUNDED = "refunded"


class Contract(TypedDict):
    """Contracts table row representation."""

    id: int
    job_id: int
    client_id: int
    freelancer_id: int
    proposal_id: int
    terms: str
    amount: float
    status: ContractStatus
    start_date: datetime
    end_date: datetime | None
    created_at: datetime


class Payment(TypedDict):
    """Payments table row representation."""

    id: int
    contract_id: int
    amount: float
    status: PaymentStatus
    description: str | None
    created_at: datetime
    updated_at: datetime | None
