"""Proposal Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.proposal import ProposalStatus


class ProposalCreate(BaseModel):
    """Schema for submitting a proposal."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    job_id: int = Field(..., gt=0, description="Job being bid on")
    bid_amount: float = Field(..., gt=0, description="Bid amount")
    estimated_duration: str = Field(..., min_length=1, max_length=100, description="Estimated duration")
    cover_letter: str = Field(..., min_length=10, max_length=5000, description="Cover letter")


class ProposalStatusUpdate(BaseModel):
    """Schema for the job owner's decision on a proposal."""

    status: ProposalStatus = Field(description="New proposal status")


class ProposalResponse(BaseModel):
    """Schema for proposal API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    freelancer_id: int
    bid_amount: float
    estimated_duration: str
    cover_letter: str
    status: ProposalStatus
    created_at: datetime
