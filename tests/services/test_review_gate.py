"""Review Gate — exactly-once reviews on completed loans.

Tests cover:
    - borrower rates owner, owner rates borrower
    - second review on the same loan conflicts, whoever submits it
    - check order: input bounds before existence, completion before participation
    - stats: zero reviews is (0.0, 0); averages rounded to 2 decimals
    - SqlReviewStore: UNIQUE(loan_id) surfaces as ReviewConflictError
"""

import pytest

from shelfshare.core.domain_types import LoanAction, LoanStatus
from shelfshare.core.errors import (
    InputValidationError,
    LoanNotCompletedError,
    PermissionDeniedError,
    ResourceNotFoundError,
    ReviewConflictError,
)
from shelfshare.infrastructure.book_store import SqlBookStore
from shelfshare.infrastructure.loan_store import SqlLoanStore
from shelfshare.infrastructure.review_store import SqlReviewStore
from shelfshare.services.loan_ledger import LoanLedger
from shelfshare.services.review_gate import ReviewGate
from tests.services.fake_repos import FakeLoanRepo, FakeReviewRepo, make_loan


@pytest.fixture
def loans():
    repo = FakeLoanRepo()
    repo.seed(make_loan(12, owner=1, borrower=2, status=LoanStatus.DONE))
    return repo


@pytest.fixture
def reviews():
    return FakeReviewRepo()


@pytest.fixture
def gate(reviews, loans):
    return ReviewGate(reviews, loans)


async def test_borrower_review_rates_owner(gate, reviews):
    review_id = await gate.submit(2, 12, 5, "Great lender")
    review = reviews.reviews[review_id]
    assert review.reviewer_id == 2
    assert review.rated_user_id == 1

    stats = await gate.stats_for(1)
    assert (stats.average_rating, stats.review_count) == (5.0, 1)


async def test_owner_review_rates_borrower(gate, reviews):
    review_id = await gate.submit(1, 12, 4)
    assert reviews.reviews[review_id].rated_user_id == 2


@pytest.mark.parametrize("second_reviewer", [1, 2])
async def test_second_review_conflicts(gate, second_reviewer):
    await gate.submit(2, 12, 5)
    with pytest.raises(ReviewConflictError):
        await gate.submit(second_reviewer, 12, 3)


async def test_invalid_rating_checked_before_anything_else(gate):
    with pytest.raises(InputValidationError):
        await gate.submit(2, 999, 9)


async def test_missing_loan_is_not_found(gate):
    with pytest.raises(ResourceNotFoundError):
        await gate.submit(2, 999, 4)


@pytest.mark.parametrize("status", [
    LoanStatus.PENDING, LoanStatus.APPROVED, LoanStatus.CANCELLED,
])
async def test_unfinished_loans_cannot_be_reviewed(gate, loans, status):
    loans.seed(make_loan(20, status=status))
    with pytest.raises(LoanNotCompletedError):
        await gate.submit(2, 20, 4)


async def test_non_participant_cannot_review(gate, reviews):
    with pytest.raises(PermissionDeniedError):
        await gate.submit(3, 12, 4)
    assert reviews.reviews == {}


async def test_user_without_reviews_has_zero_stats(gate):
    stats = await gate.stats_for(77)
    assert stats.average_rating == 0.0
    assert stats.review_count == 0
    assert await gate.reviews_for(77) == []


async def test_average_rounded_to_two_decimals(gate, loans):
    for loan_id in (30, 31, 32):
        loans.seed(make_loan(loan_id, status=LoanStatus.DONE))
    for loan_id, rating in ((30, 5), (31, 4), (32, 4)):
        await gate.submit(2, loan_id, rating)
    stats = await gate.stats_for(1)
    assert stats.average_rating == 4.33
    assert stats.review_count == 3


# ─── SQL store ───────────────────────────────────────────────────

async def _done_loan(test_db, owner, borrower, book):
    ledger = LoanLedger(SqlLoanStore(test_db), SqlBookStore(test_db))
    loan_id = await ledger.request_loan(book.id, borrower.id)
    await ledger.transition(loan_id, owner.id, LoanAction.APPROVE)
    await ledger.transition(loan_id, owner.id, LoanAction.COMPLETE)
    return loan_id


async def test_sql_unique_loan_id_maps_to_conflict(test_db, owner, borrower, book):
    loan_id = await _done_loan(test_db, owner, borrower, book)
    store = SqlReviewStore(test_db)
    await store.create(loan_id, borrower.id, owner.id, 5, None)

    # Bypasses the gate's exists check, as a concurrent submit would
    with pytest.raises(ReviewConflictError):
        await store.create(loan_id, owner.id, borrower.id, 2, None)


async def test_sql_reviews_and_stats(test_db, owner, borrower, book):
    loan_id = await _done_loan(test_db, owner, borrower, book)
    gate = ReviewGate(SqlReviewStore(test_db), SqlLoanStore(test_db))
    await gate.submit(borrower.id, loan_id, 5, "Smooth handover")

    stats = await gate.stats_for(owner.id)
    assert (stats.average_rating, stats.review_count) == (5.0, 1)

    listed = await gate.reviews_for(owner.id)
    assert len(listed) == 1
    assert listed[0].reviewer_username == "borrower"
    assert listed[0].comment == "Smooth handover"
