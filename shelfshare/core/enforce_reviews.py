"""Review Eligibility Enforcement — pure checks deciding who may review which loan.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Only DONE loans are reviewable
    - Reviewer must be a participant; rated user is always the OTHER participant,
      so self-review cannot be expressed
    - Averages are rounded to 2 decimals; zero reviews is (0.0, 0), never a division error
"""

from shelfshare.core.domain_types import (
    LoanRecord,
    LoanStatus,
    MAX_RATING,
    MAX_REVIEW_COMMENT_LENGTH,
    MIN_RATING,
    RatingStats,
    UserId,
)
from shelfshare.core.errors import (
    ErrorContext,
    InputValidationError,
    LoanNotCompletedError,
    PermissionDeniedError,
)


def validate_review_input(rating: int, comment: str | None) -> None:
    """Rating within [MIN_RATING, MAX_RATING]; comment within length bound."""
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InputValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}", "rating",
        )
    if comment is not None and len(comment) > MAX_REVIEW_COMMENT_LENGTH:
        raise InputValidationError(
            f"Comment too long (max {MAX_REVIEW_COMMENT_LENGTH} characters)",
            "comment",
        )


def check_reviewable(loan: LoanRecord, acting_user_id: int) -> UserId:
    """Return the rated user's id if `acting_user_id` may review `loan`."""
    if loan.status != LoanStatus.DONE:
        raise LoanNotCompletedError(
            loan.status.value, ErrorContext(loan_id=loan.id),
        )
    if not loan.is_participant(acting_user_id):
        raise PermissionDeniedError(
            "You are not part of this loan",
            ErrorContext(user_id=acting_user_id, loan_id=loan.id),
        )
    return rated_party(loan, acting_user_id)


def rated_party(loan: LoanRecord, reviewer_id: int) -> UserId:
    """The participant on the other side of the loan."""
    return loan.owner_id if reviewer_id == loan.borrower_id else loan.borrower_id


def summarize_ratings(total: float | None, count: int) -> RatingStats:
    """Build RatingStats from a SUM/COUNT pair."""
    if not count:
        return RatingStats(average_rating=0.0, review_count=0)
    return RatingStats(
        average_rating=round(float(total or 0) / count, 2),
        review_count=int(count),
    )
