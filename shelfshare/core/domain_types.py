"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, BookId, LoanId, ReviewId wrap ints — never use bare int in domain logic
    - Identity is frozen: a verified token never mutates
    - LoanRecord/ReviewRecord are read snapshots; mutation happens only at the repository
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to DB column values
    - Frozen dataclasses for records: services never hold ORM instances (ADR: core/shell boundary)
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
BookId = NewType("BookId", int)
LoanId = NewType("LoanId", int)
ReviewId = NewType("ReviewId", int)


# ─── Bounds ──────────────────────────────────────────────────────

MAX_LOAN_MESSAGE_LENGTH: int = 500
MAX_REVIEW_COMMENT_LENGTH: int = 1000
MIN_RATING: int = 1
MAX_RATING: int = 5


# ─── Enums ───────────────────────────────────────────────────────

class LoanStatus(str, Enum):
    """Loan lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    DONE = "done"


class LoanAction(str, Enum):
    """Owner-side actions that drive the loan state machine."""
    APPROVE = "approve"
    DECLINE = "decline"
    COMPLETE = "complete"


class LoanSideField(str, Enum):
    """Date columns stamped by a transition."""
    START_DATE = "start_date"
    RETURN_DATE = "return_date"


# ─── Values ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Identity:
    """Verified caller identity decoded from a signed token."""
    user_id: UserId
    email: str
    username: str
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class LoanRecord:
    """Snapshot of a persisted loan."""
    id: LoanId
    book_id: BookId
    borrower_id: UserId
    owner_id: UserId
    status: LoanStatus
    start_date: date | None
    due_date: date | None
    return_date: date | None
    message: str | None
    created_at: datetime | None = None
    book_title: str | None = None

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.borrower_id, self.owner_id)


@dataclass(frozen=True)
class ReviewRecord:
    """Snapshot of a persisted review."""
    id: ReviewId
    loan_id: LoanId
    reviewer_id: UserId
    rated_user_id: UserId
    rating: int
    comment: str | None
    created_at: datetime | None = None
    reviewer_username: str | None = None


@dataclass(frozen=True)
class RatingStats:
    """Aggregate rating for one user."""
    average_rating: float
    review_count: int
