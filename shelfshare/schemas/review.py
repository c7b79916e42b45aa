"""Review Schemas — submission input and public review listings.

Invariants:
    - rating and comment bounds are enforced by ReviewGate, not here: the core
      answers out-of-range values with its own VALIDATION_ERROR envelope
"""

from datetime import datetime

from pydantic import BaseModel, Field

from shelfshare.core.domain_types import ReviewRecord


class ReviewCreate(BaseModel):
    loan_id: int = Field(gt=0)
    rating: int
    comment: str | None = None


class ReviewCreated(BaseModel):
    message: str = "Review submitted successfully"
    review_id: int


class ReviewResponse(BaseModel):
    id: int
    loan_id: int
    reviewer_id: int
    reviewer_username: str | None
    rated_user_id: int
    rating: int
    comment: str | None
    created_at: datetime | None

    @classmethod
    def from_record(cls, r: ReviewRecord) -> "ReviewResponse":
        return cls(
            id=r.id, loan_id=r.loan_id, reviewer_id=r.reviewer_id,
            reviewer_username=r.reviewer_username, rated_user_id=r.rated_user_id,
            rating=r.rating, comment=r.comment, created_at=r.created_at,
        )


class UserReviews(BaseModel):
    user_id: int
    average_rating: float
    review_count: int
    reviews: list[ReviewResponse]
