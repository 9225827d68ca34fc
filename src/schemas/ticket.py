"""Support ticket Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.ticket import TicketPriority, TicketStatus, TicketType


class TicketCreate(BaseModel):
    """Schema for filing a support ticket."""

    model_config = ConfigDict(from_attributes=True)

    title: str = Field(..., min_length=5, max_length=200, description="Short summary")
    description: str = Field(..., min_length=10, max_length=10000, description="Full description")
    type: TicketType = Field(default=TicketType.SUPPORT, description="Ticket category")
    priority: TicketPriority = Field(default=TicketPriority.MEDIUM, description="Priority")
    job_id: int | None = Field(default=None, gt=0, description="Related job, if any")
    contract_id: int | None = Field(default=None, gt=0, description="Related contract, if any")


class TicketResponse(BaseModel):
    """Schema for support ticket API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str
    type: TicketType
    priority: TicketPriority
    status: TicketStatus
    job_id: int | None = None
    contract_id: int | None = None
    assigned_to_id: int | None = None
    created_at: datetime
    updated_at: datetime | None = None
    resolved_at: datetime | None = None


class TicketUpdate(BaseModel):
    """Schema for support staff moving a ticket along. All fields optional."""

    status: TicketStatus | None = Field(default=None, description="New status")
    assigned_to_id: int | None = Field(default=None, gt=0, description="Staff member handling the ticket")
