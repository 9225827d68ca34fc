"""Review API routes."""

from fastapi import APIRouter, status

from src.api.deps import CurrentAccount
from src.schemas.review import ReviewCreate, ReviewResponse
from src.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a contract",
    description="Rate the other party on a contract the caller is part of. One review per party.",
)
async def submit_review(data: ReviewCreate, account: CurrentAccount) -> ReviewResponse:
    """Submit a review as the caller."""
    service = ReviewService()
    review = await service.submit(account["id"], data)
    return ReviewResponse(**review)


@router.get("/user/{user_id}", response_model=list[ReviewResponse], summary="Reviews a user received")
async def list_user_reviews(user_id: int) -> list[ReviewResponse]:
    """List the reviews a user has received, newest first."""
    service = ReviewService()
    reviews = await service.list_received(user_id)
    return [ReviewResponse(**review) for review in reviews]
