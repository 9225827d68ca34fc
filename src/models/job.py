"""Job model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict


class JobStatus(str, Enum):
    """Job status values matching database enum."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


class Job(TypedDict):
    """Jobs table row representation."""

    id: int
    client_id: int
    title: str
    description: str
    category: str
    skills: list[str]
    budget: float | None
    hourly_rate: float | None
    status: JobStatus
    deadline_date: datetime | None
    created_at: datetime


class JobCreate(TypedDict, total=False):
    """Data required to create a new job."""

    client_id: int
    title: str
    description: str
    category: str
    skills: list[str]
    budget: float | None
    hourly_rate: float | None
    status: JobStatus
    deadline_date: str | None
