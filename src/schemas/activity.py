"""Activity Pydantic schemas.

Stored activity metadata is a free-form jsonb column. At the API boundary it
becomes a tagged union keyed by ``type``, each variant carrying only the
fields that activity needs.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class JobPosted(BaseModel):
    """A client posted a job."""

    type: Literal["job_posted"] = "job_posted"
    job_id: int | None = None
    job_title: str = "Untitled Job"


class ProposalSubmitted(BaseModel):
    """A freelancer submitted a proposal."""

    type: Literal["proposal_submitted"] = "proposal_submitted"
    job_id: int | None = None
    proposal_id: int | None = None


class MessageSent(BaseModel):
    """A message was sent."""

    type: Literal["message_sent"] = "message_sent"
    message_id: int | None = None
    receiver_id: int | None = None
    sender_id: int | None = None
    job_id: int | None = None


class ContractCreated(BaseModel):
    """A contract was created for a job."""

    type: Literal["contract_created"] = "contract_created"
    contract_id: int | None = None
    job_id: int | None = None
    freelancer_id: int | None = None


class PaymentReleased(BaseModel):
    """An escrowed payment was released."""

    type: Literal["payment_released"] = "payment_released"
    amount: float
    contract_id: int | None = None


class ReviewSubmitted(BaseModel):
    """A review was left on a contract."""

    type: Literal["review_submitted"] = "review_submitted"
    rating: int = Field(ge=1, le=5)
    review_id: int | None = None
    contract_id: int | None = None


ActivityDetails = Annotated[
    Union[JobPosted, ProposalSubmitted, MessageSent, ContractCreated, PaymentReleased, ReviewSubmitted],
    Field(discriminator="type"),
]


class ActivityDisplay(BaseModel):
    """Presentation fields derived from an activity's details."""

    icon: str = Field(description="Icon name")
    color: str = Field(description="Accent color name")
    message: str = Field(description="Human-readable summary")


class ActivityResponse(BaseModel):
    """Schema for activity feed entries."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Activity id")
    user_id: int = Field(description="Owner of the activity")
    created_at: datetime = Field(description="When the activity happened")
    details: ActivityDetails | None = Field(
        default=None,
        description="Typed activity payload; null when the stored row cannot be interpreted",
    )
    display: ActivityDisplay = Field(description="Icon, color and message for rendering")
