"""Review Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Schema for reviewing the other party on a contract."""

    model_config = ConfigDict(from_attributes=True)

    contract_id: int = Field(..., gt=0, description="Contract being reviewed")
    rating: int = Field(..., ge=1, le=5, description="Star rating")
    comment: str | None = Field(default=None, max_length=5000, description="Free-text review")


class ReviewResponse(BaseModel):
    """Schema for review API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    contract_id: int
    reviewer_id: int
    receiver_id: int
    rating: int
    comment: str | None = None
    created_at: datetime
