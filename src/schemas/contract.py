"""Contract and payment Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.contract import ContractStatus, PaymentStatus


class ContractCreate(BaseModel):
    """Schema for hiring the freelancer behind a proposal."""

    model_config = ConfigDict(from_attributes=True)

    proposal_id: int = Field(..., gt=0, description="Proposal being turned into a contract")
    terms: str = Field(..., min_length=1, max_length=10000, description="Agreed terms")
    amount: float = Field(..., gt=0, description="Agreed contract amount")
    end_date: datetime | None = Field(default=None, description="Planned end date")


class ContractStatusUpdate(BaseModel):
    """Schema for moving a contract to a new status."""

    status: ContractStatus = Field(description="New contract status")


class ContractResponse(BaseModel):
    """Schema for contract API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    client_id: int
    freelancer_id: int
    proposal_id: int
    terms: str
    amount: float
    status: ContractStatus
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime


class PaymentCreate(BaseModel):
    """Schema for funding a contract into escrow."""

    model_config = ConfigDict(from_attributes=True)

    contract_id: int = Field(..., gt=0, description="Contract being paid")
    amount: float = Field(..., gt=0, description="Amount placed in escrow")
    description: str | None = Field(default=None, max_length=1000, description="What the payment covers")


class PaymentResponse(BaseModel):
    """Schema for payment API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    contract_id: int
    amount: float
    status: PaymentStatus
    description: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
