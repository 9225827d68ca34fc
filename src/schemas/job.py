"""Job Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.job import JobStatus


class JobCreate(BaseModel):
    """Schema for posting a new job."""

    model_config = ConfigDict(from_attributes=True)

    title: str = Field(..., min_length=5, max_length=200, description="Job title")
    description: str = Field(..., min_length=20, max_length=10000, description="Job description")
    category: str = Field(..., min_length=1, max_length=100, description="Job category")
    skills: list[str] = Field(default_factory=list, description="Required skills")
    budget: float | None = Field(default=None, gt=0, description="Fixed budget")
    hourly_rate: float | None = Field(default=None, gt=0, description="Hourly rate")
    deadline_date: datetime | None = Field(default=None, description="Optional deadline")

    @model_validator(mode="after")
    def require_pricing(self) -> "JobCreate":
        """A job needs a fixed budget or an hourly rate."""
        if self.budget is None and self.hourly_rate is None:
            raise ValueError("Either budget or hourly_rate is required")
        return self


class JobResponse(BaseModel):
    """Schema for job API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Job id")
    client_id: int = Field(description="Posting client's user id")
    title: str
    description: str
    category: str
    skills: list[str] = Field(default_factory=list)
    budget: float | None = None
    hourly_rate: float | None = None
    status: JobStatus
    deadline_date: datetime | None = None
    created_at: datetime

