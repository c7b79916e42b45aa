"""Review Store — SQLAlchemy persistence for reviews and rating aggregates.

Invariants:
    - UNIQUE(loan_id) is the final arbiter of exactly-once review creation
    - An IntegrityError on insert that leaves a review in place for the loan is
      reported as ReviewConflictError (a concurrent submit won)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.core.domain_types import (
    LoanId, RatingStats, ReviewId, ReviewRecord, UserId,
)
from shelfshare.core.enforce_reviews import summarize_ratings
from shelfshare.core.errors import ReviewConflictError
from shelfshare.models.review import Review
from shelfshare.models.user import User

logger = logging.getLogger(__name__)


class SqlReviewStore:
    """ReviewRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists_for_loan(self, loan_id: LoanId) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Review).where(Review.loan_id == loan_id),
        )
        return result.scalar_one() > 0

    async def create(
        self,
        loan_id: LoanId,
        reviewer_id: UserId,
        rated_user_id: UserId,
        rating: int,
        comment: str | None,
    ) -> ReviewId:
        review = Review(
            loan_id=loan_id,
            reviewer_id=reviewer_id,
            rated_user_id=rated_user_id,
            rating=rating,
            comment=comment,
        )
        self.db.add(review)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            if await self.exists_for_loan(loan_id):
                logger.warning(
                    "Concurrent review lost the unique race",
                    extra={"loan_id": loan_id},
                )
                raise ReviewConflictError(loan_id)
            raise
        return ReviewId(review.id)

    async def list_for_user(self, user_id: UserId) -> list[ReviewRecord]:
        result = await self.db.execute(
            select(Review, User.username)
            .join(User, User.id == Review.reviewer_id)
            .where(Review.rated_user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc()),
        )
        return [
            ReviewRecord(
                id=ReviewId(r.id),
                loan_id=LoanId(r.loan_id),
                reviewer_id=UserId(r.reviewer_id),
                rated_user_id=UserId(r.rated_user_id),
                rating=r.rating,
                comment=r.comment,
                created_at=r.created_at,
                reviewer_username=username,
            )
            for r, username in result.all()
        ]

    async def stats_for_user(self, user_id: UserId) -> RatingStats:
        result = await self.db.execute(
            select(func.sum(Review.rating), func.count(Review.id))
            .where(Review.rated_user_id == user_id),
        )
        total, count = result.one()
        return summarize_ratings(total, count)
