"""Review model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict


class Review(TypedDict):
    """Reviews table row representation.

    ``receiver_id`` is the other party on the contract.
    """

    id: int
    contract_id: int
    reviewer_id: int
    receiver_id: int
    rating: int
    comment: str | None
    created_at: datetime
