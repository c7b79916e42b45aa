"""Review Routes — submit a review (authenticated) and read a user's reviews (public)."""

from fastapi import APIRouter, Depends, status

from shelfshare.api.dependencies import get_review_gate, require_identity
from shelfshare.core.domain_types import Identity, LoanId, UserId
from shelfshare.schemas.review import (
    ReviewCreate, ReviewCreated, ReviewResponse, UserReviews,
)
from shelfshare.services.review_gate import ReviewGate

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.post(
    "", response_model=ReviewCreated, status_code=status.HTTP_201_CREATED,
)
async def submit_review(
    body: ReviewCreate,
    identity: Identity = Depends(require_identity),
    gate: ReviewGate = Depends(get_review_gate),
):
    review_id = await gate.submit(
        identity.user_id, LoanId(body.loan_id), body.rating, body.comment,
    )
    return ReviewCreated(review_id=review_id)


@router.get("/{user_id}", response_model=UserReviews)
async def user_reviews(
    user_id: int,
    gate: ReviewGate = Depends(get_review_gate),
):
    """Rating summary and reviews received by `user_id`. Public."""
    stats = await gate.stats_for(UserId(user_id))
    reviews = await gate.reviews_for(UserId(user_id))
    return UserReviews(
        user_id=user_id,
        average_rating=stats.average_rating,
        review_count=stats.review_count,
        reviews=[ReviewResponse.from_record(r) for r in reviews],
    )
