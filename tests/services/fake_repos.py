"""In-memory repositories for exercising the ledger and review gate without a DB.

Design Decisions:
    - transition_if is atomic with respect to the event loop (no await between
      the status check and the write), same guarantee the SQL UPDATE gives
    - get() yields to the loop so concurrent callers interleave at the read
"""

import asyncio
from dataclasses import replace
from datetime import date

from shelfshare.core.domain_types import (
    BookId, LoanId, LoanRecord, LoanStatus, RatingStats, ReviewId, ReviewRecord, UserId,
)
from shelfshare.core.enforce_loans import Transition, side_field_values
from shelfshare.core.enforce_reviews import summarize_ratings
from shelfshare.core.errors import ReviewConflictError


class FakeBookRepo:
    def __init__(self, owners: dict[int, int] | None = None):
        self.owners = dict(owners or {})

    async def get_owner_id(self, book_id: BookId) -> UserId | None:
        owner = self.owners.get(book_id)
        return UserId(owner) if owner is not None else None


class FakeLoanRepo:
    def __init__(self):
        self.loans: dict[int, LoanRecord] = {}
        self._next_id = 1

    def seed(self, loan: LoanRecord) -> LoanRecord:
        self.loans[loan.id] = loan
        self._next_id = max(self._next_id, loan.id + 1)
        return loan

    async def create(self, book_id, borrower_id, owner_id, start_date, due_date, message):
        loan_id = LoanId(self._next_id)
        self._next_id += 1
        self.loans[loan_id] = LoanRecord(
            id=loan_id, book_id=book_id, borrower_id=borrower_id, owner_id=owner_id,
            status=LoanStatus.PENDING, start_date=start_date, due_date=due_date,
            return_date=None, message=message,
        )
        return loan_id

    async def get(self, loan_id: LoanId) -> LoanRecord | None:
        await asyncio.sleep(0)
        return self.loans.get(loan_id)

    async def transition_if(
        self, loan_id: LoanId, owner_id: UserId, transition: Transition, today: date,
    ) -> bool:
        loan = self.loans.get(loan_id)
        if (
            loan is None
            or loan.owner_id != owner_id
            or loan.status != transition.required
        ):
            return False
        changes = {}
        for column, stamp in side_field_values(transition, today).items():
            if transition.keep_existing and getattr(loan, column) is not None:
                continue
            changes[column] = stamp
        self.loans[loan_id] = replace(loan, status=transition.result, **changes)
        return True

    async def list_received(self, owner_id, priority):
        return self._sorted([l for l in self.loans.values() if l.owner_id == owner_id], priority)

    async def list_borrowed(self, borrower_id, priority):
        return self._sorted(
            [l for l in self.loans.values() if l.borrower_id == borrower_id], priority,
        )

    @staticmethod
    def _sorted(loans, priority):
        rank = {status: i for i, status in enumerate(priority)}
        return sorted(loans, key=lambda l: (rank[l.status], -l.id))


class FakeReviewRepo:
    def __init__(self):
        self.reviews: dict[int, ReviewRecord] = {}

    async def exists_for_loan(self, loan_id: LoanId) -> bool:
        return any(r.loan_id == loan_id for r in self.reviews.values())

    async def create(self, loan_id, reviewer_id, rated_user_id, rating, comment):
        # UNIQUE(loan_id)
        if await self.exists_for_loan(loan_id):
            raise ReviewConflictError(loan_id)
        review_id = ReviewId(len(self.reviews) + 1)
        self.reviews[review_id] = ReviewRecord(
            id=review_id, loan_id=loan_id, reviewer_id=reviewer_id,
            rated_user_id=rated_user_id, rating=rating, comment=comment,
        )
        return review_id

    async def list_for_user(self, user_id: UserId) -> list[ReviewRecord]:
        return [r for r in self.reviews.values() if r.rated_user_id == user_id]

    async def stats_for_user(self, user_id: UserId) -> RatingStats:
        ratings = [r.rating for r in self.reviews.values() if r.rated_user_id == user_id]
        return summarize_ratings(sum(ratings), len(ratings))


def make_loan(
    loan_id: int = 12,
    owner: int = 1,
    borrower: int = 2,
    status: LoanStatus = LoanStatus.PENDING,
    start_date: date | None = None,
) -> LoanRecord:
    return LoanRecord(
        id=LoanId(loan_id), book_id=BookId(5),
        borrower_id=UserId(borrower), owner_id=UserId(owner),
        status=status, start_date=start_date, due_date=None,
        return_date=None, message=None,
    )
