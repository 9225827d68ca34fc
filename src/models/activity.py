"""Activity model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import Any, TypedDict


class ActivityType(str, Enum):
    """Activity type values matching the activities.type column."""

    JOB_POSTED = "job_posted"
    PROPOSAL_SUBMITTED = "proposal_submitted"
    MESSAGE_SENT = "message_sent"
    CONTRACT_CREATED = "contract_created"
    PAYMENT_RELEASED = "payment_released"
    REVIEW_SUBMITTED = "review_submitted"


class Activity(TypedDict):
    """Activities table row representation.

    ``metadata`` is stored as jsonb; its shape depends on ``type``.
    """

    id: int
    user_id: int
    type: ActivityType
    metadata: dict[str, Any]
    created_at: datetime


class ActivityCreate(TypedDict):
    """Data required to record an activity."""

    user_id: int
    type: ActivityType
    metadata: dict[str, Any]
