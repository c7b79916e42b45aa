"""Review Gate — exactly-once reviews between the two participants of a completed loan.

Invariants:
    - Input bounds checked first, then duplicate, existence, completion, participation
    - Rated user is derived, never supplied by the caller
    - Review reads (stats, listings) are public

Design Decisions:
    - The exists check gives a clean error on the common path; the UNIQUE constraint
      in the store catches the concurrent path
"""

import logging

from shelfshare.core.domain_types import (
    LoanId, RatingStats, ReviewId, ReviewRecord, UserId,
)
from shelfshare.core.enforce_reviews import check_reviewable, validate_review_input
from shelfshare.core.errors import ReviewConflictError, ResourceNotFoundError
from shelfshare.core.repository_protocols import LoanRepository, ReviewRepository

logger = logging.getLogger(__name__)


class ReviewGate:
    def __init__(self, reviews: ReviewRepository, loans: LoanRepository):
        self.reviews = reviews
        self.loans = loans

    async def submit(
        self,
        acting_user_id: UserId,
        loan_id: LoanId,
        rating: int,
        comment: str | None = None,
    ) -> ReviewId:
        """Create the single review allowed for `loan_id`."""
        validate_review_input(rating, comment)

        if await self.reviews.exists_for_loan(loan_id):
            raise ReviewConflictError(loan_id)

        loan = await self.loans.get(loan_id)
        if loan is None:
            raise ResourceNotFoundError("Loan", str(loan_id))

        rated_user_id = check_reviewable(loan, acting_user_id)

        review_id = await self.reviews.create(
            loan_id, acting_user_id, rated_user_id, rating, comment,
        )
        logger.info(
            "Review submitted",
            extra={"review_id": review_id, "loan_id": loan_id, "user_id": acting_user_id},
        )
        return review_id

    async def stats_for(self, user_id: UserId) -> RatingStats:
        return await self.reviews.stats_for_user(user_id)

    async def reviews_for(self, user_id: UserId) -> list[ReviewRecord]:
        return await self.reviews.list_for_user(user_id)
