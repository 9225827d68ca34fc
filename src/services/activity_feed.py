"""Activity feed interpretation and display formatting."""

import logging
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from typing_extensions import assert_never

from src.schemas.activity import (
    ActivityDetails,
    ActivityDisplay,
    ActivityResponse,
    ContractCreated,
    JobPosted,
    MessageSent,
    PaymentReleased,
    ProposalSubmitted,
    ReviewSubmitted,
)

logger = logging.getLogger(__name__)

_details_adapter: TypeAdapter[ActivityDetails] = TypeAdapter(ActivityDetails)

FALLBACK_DISPLAY = ActivityDisplay(icon="bell", color="blue", message="New activity")


def parse_details(activity_type: str, metadata: dict[str, Any] | None) -> ActivityDetails:
    """Build the typed variant for a stored activity row.

    Raises:
        pydantic.ValidationError: If the type is unknown or metadata does not
            fit the variant.
    """
    return _details_adapter.validate_python({**(metadata or {}), "type": activity_type})


def format_activity(details: ActivityDetails, viewer_id: int | None = None) -> ActivityDisplay:
    """Derive icon, color and message from an activity variant.

    Args:
        details: The typed activity payload.
        viewer_id: The user looking at the feed; changes message wording.

    Returns:
        ActivityDisplay: Presentation fields.
    """
    match details:
        case JobPosted(job_title=title):
            return ActivityDisplay(icon="briefcase", color="blue", message=f'You posted a new job: "{title}"')
        case ProposalSubmitted():
            return ActivityDisplay(icon="file-alt", color="indigo", message="You submitted a proposal for a job")
        case MessageSent(receiver_id=receiver_id, sender_id=sender_id):
            if viewer_id is not None and receiver_id == viewer_id and sender_id is not None:
                message = f"You received a message from User #{sender_id}"
            elif receiver_id is not None:
                message = f"You sent a message to User #{receiver_id}"
            else:
                message = "You received a message"
            return ActivityDisplay(icon="comment-dots", color="blue", message=message)
        case ContractCreated(job_id=job_id):
            return ActivityDisplay(icon="handshake", color="green", message=f"A contract was created for job #{job_id}")
        case PaymentReleased(amount=amount):
            return ActivityDisplay(icon="dollar-sign", color="green", message=f"Payment of ${amount:,.2f} was released")
        case ReviewSubmitted(rating=rating):
            return ActivityDisplay(icon="star", color="yellow", message=f"You received a {rating}-star review")
        case _:
            assert_never(details)


def to_activity_response(row: dict[str, Any], viewer_id: int | None = None) -> ActivityResponse:
    """Convert an activities row into a feed entry.

    Rows whose metadata cannot be interpreted still appear in the feed with
    the generic display and no details.
    """
    try:
        details = parse_details(row["type"], row.get("metadata"))
    except PydanticValidationError as e:
        logger.warning("Uninterpretable activity %s (%s): %s", row.get("id"), row.get("type"), e)
        return ActivityResponse(
            id=row["id"],
            user_id=row["user_id"],
            created_at=row["created_at"],
            details=None,
            display=FALLBACK_DISPLAY,
        )

    return ActivityResponse(
        id=row["id"],
        user_id=row["user_id"],
        created_at=row["created_at"],
        details=details,
        display=format_activity(details, viewer_id),
    )
