"""Proposal model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class ProposalStatus(str, Enum):
    """Proposal status values matching database enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Proposal(TypedDict):
    """Proposals table row representation."""

    id: int
    job_id: int
    freelancer_id: int
    bid_amount: float
    estimated_duration: str
    cover_letter: str
    status: ProposalStatus
    created_at: datetime


class ProposalCreate(TypedDict, total=False):
    """Data required to create a new proposal."""

    job_id: int
    freelancer_id: int
    bid_amount: float
    estimated_duration: str
    cover_letter: str
    status: ProposalStatus
