"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Repositories return frozen records, never ORM instances
    - LoanRepository.transition_if is the ONLY way a loan status changes, and it is a
      single conditional write (compare-and-swap on id, owner_id and status)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves
"""

from datetime import date
from typing import Any, Protocol

from shelfshare.core.domain_types import (
    BookId, LoanId, LoanRecord, LoanStatus, RatingStats, ReviewId, ReviewRecord, UserId,
)
from shelfshare.core.enforce_loans import Transition


class UserRepository(Protocol):
    """Contract for account persistence. Returns the stored row (id, email,
    username, password_hash)."""
    async def create(self, username: str, email: str, password_hash: str) -> Any: ...
    async def get_by_id(self, user_id: int) -> Any: ...
    async def get_by_email(self, email: str) -> Any: ...
    async def get_by_username(self, username: str) -> Any: ...
    async def update(self, user: Any, changes: dict) -> Any: ...


class BookRepository(Protocol):
    """Contract for the book lookup the loan ledger needs."""
    async def get_owner_id(self, book_id: BookId) -> UserId | None: ...


class LoanRepository(Protocol):
    """Contract for loan persistence — implemented by shell."""
    async def create(
        self,
        book_id: BookId,
        borrower_id: UserId,
        owner_id: UserId,
        start_date: date | None,
        due_date: date | None,
        message: str | None,
    ) -> LoanId: ...
    async def get(self, loan_id: LoanId) -> LoanRecord | None: ...
    async def transition_if(
        self,
        loan_id: LoanId,
        owner_id: UserId,
        transition: Transition,
        today: date,
    ) -> bool: ...
    async def list_received(
        self, owner_id: UserId, priority: tuple[LoanStatus, ...],
    ) -> list[LoanRecord]: ...
    async def list_borrowed(
        self, borrower_id: UserId, priority: tuple[LoanStatus, ...],
    ) -> list[LoanRecord]: ...


class ReviewRepository(Protocol):
    """Contract for review persistence — implemented by shell."""
    async def exists_for_loan(self, loan_id: LoanId) -> bool: ...
    async def create(
        self,
        loan_id: LoanId,
        reviewer_id: UserId,
        rated_user_id: UserId,
        rating: int,
        comment: str | None,
    ) -> ReviewId: ...
    async def list_for_user(self, user_id: UserId) -> list[ReviewRecord]: ...
    async def stats_for_user(self, user_id: UserId) -> RatingStats: ...
