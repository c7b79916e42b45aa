"""Loan Ledger — the loan state machine, scoped by acting identity.

Invariants:
    - New loans always start PENDING with owner_id copied from the book
    - transition() checks ownership, then status, then performs ONE conditional write;
      a lost race surfaces as InvalidTransitionError (or ResourceNotFoundError if the
      loan vanished), never as a silent overwrite
    - Owner-only: the borrower cannot approve, decline, or complete
    - No caching: every call reads the repository afresh

Design Decisions:
    - today() injected: transition side fields are deterministic under test
    - Rule checks delegated to core/enforce_loans (pure); this class only sequences IO
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable

from shelfshare.core.domain_types import (
    BookId, LoanAction, LoanId, LoanRecord, UserId,
)
from shelfshare.core.enforce_loans import (
    BORROWED_PRIORITY,
    RECEIVED_PRIORITY,
    parse_action,
    validate_loan_request,
    validate_transition,
)
from shelfshare.core.errors import (
    ErrorContext,
    InvalidTransitionError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from shelfshare.core.repository_protocols import BookRepository, LoanRepository

logger = logging.getLogger(__name__)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class LoanLedger:
    """Owns loan creation, transitions, and role-scoped listings."""

    def __init__(
        self,
        loans: LoanRepository,
        books: BookRepository,
        today: Callable[[], date] = _utc_today,
    ):
        self.loans = loans
        self.books = books
        self._today = today

    async def request_loan(
        self,
        book_id: BookId,
        borrower_id: UserId,
        start_date: date | None = None,
        due_date: date | None = None,
        message: str | None = None,
    ) -> LoanId:
        """Create a PENDING loan for `book_id` on behalf of `borrower_id`."""
        owner_id = await self.books.get_owner_id(book_id)
        if owner_id is None:
            raise ResourceNotFoundError("Book", str(book_id))

        validate_loan_request(borrower_id, owner_id, start_date, due_date, message)

        loan_id = await self.loans.create(
            book_id, borrower_id, owner_id, start_date, due_date, message,
        )
        logger.info(
            "Loan requested",
            extra={"loan_id": loan_id, "book_id": book_id, "user_id": borrower_id},
        )
        return loan_id

    async def transition(
        self, loan_id: LoanId, acting_user_id: UserId, action: LoanAction | str,
    ) -> LoanRecord:
        """Apply approve/decline/complete. Returns the loan after the write."""
        action = parse_action(action) if isinstance(action, str) else action

        loan = await self.loans.get(loan_id)
        if loan is None:
            raise ResourceNotFoundError("Loan", str(loan_id))

        transition = validate_transition(loan, acting_user_id, action)

        applied = await self.loans.transition_if(
            loan_id, acting_user_id, transition, self._today(),
        )
        current = await self.loans.get(loan_id)
        # The book, and its loans with it, can be deleted between write and re-read
        if current is None:
            raise ResourceNotFoundError("Loan", str(loan_id))
        if not applied:
            logger.warning(
                "Loan transition lost a concurrent race",
                extra={"loan_id": loan_id, "action": action.value},
            )
            raise InvalidTransitionError(
                action.value, current.status.value,
                ErrorContext(loan_id=loan_id, action=action.value),
            )

        logger.info(
            f"Loan {transition.required.value} -> {transition.result.value}",
            extra={
                "loan_id": loan_id, "user_id": acting_user_id, "action": action.value,
            },
        )
        return current

    async def get_for_participant(
        self, loan_id: LoanId, user_id: UserId,
    ) -> LoanRecord:
        """Loan details, visible only to its borrower or owner."""
        loan = await self.loans.get(loan_id)
        if loan is None:
            raise ResourceNotFoundError("Loan", str(loan_id))
        if not loan.is_participant(user_id):
            raise PermissionDeniedError(
                "You are not part of this loan",
                ErrorContext(user_id=user_id, loan_id=loan_id),
            )
        return loan

    async def received_for(self, owner_id: UserId) -> list[LoanRecord]:
        """Loans on the caller's books: pending, approved, done, cancelled."""
        return await self.loans.list_received(owner_id, RECEIVED_PRIORITY)

    async def borrowed_by(self, borrower_id: UserId) -> list[LoanRecord]:
        """Loans the caller requested: approved, pending, done, cancelled."""
        return await self.loans.list_borrowed(borrower_id, BORROWED_PRIORITY)
