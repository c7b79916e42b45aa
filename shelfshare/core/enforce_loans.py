"""Loan State Machine Enforcement — pure checks for loan requests and transitions.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Violations raise typed ShelfShareError subclasses; success returns None (or a value)
    - TRANSITIONS is the single source of truth for the state machine
    - No transition ever targets PENDING; CANCELLED and DONE have no outgoing edges

Design Decisions:
    - Raise, not return dicts: every caller is an HTTP request that must stop on the
      first violation, and the global handler already maps errors to status codes
    - Ownership checked before status: a non-owner learns nothing about loan state
    - Sort priorities are per role so actionable loans come first
"""

from dataclasses import dataclass
from datetime import date

from shelfshare.core.domain_types import (
    LoanAction,
    LoanRecord,
    LoanSideField,
    LoanStatus,
    MAX_LOAN_MESSAGE_LENGTH,
)
from shelfshare.core.errors import (
    ErrorContext,
    InputValidationError,
    InvalidTransitionError,
    PermissionDeniedError,
    SelfLoanError,
)


@dataclass(frozen=True)
class Transition:
    """One edge of the loan state machine."""
    required: LoanStatus
    result: LoanStatus
    stamps: LoanSideField | None = None
    keep_existing: bool = False  # stamp only if the column is still NULL


TRANSITIONS: dict[LoanAction, Transition] = {
    LoanAction.APPROVE: Transition(
        LoanStatus.PENDING, LoanStatus.APPROVED,
        LoanSideField.START_DATE, keep_existing=True,
    ),
    LoanAction.DECLINE: Transition(LoanStatus.PENDING, LoanStatus.CANCELLED),
    LoanAction.COMPLETE: Transition(
        LoanStatus.APPROVED, LoanStatus.DONE, LoanSideField.RETURN_DATE,
    ),
}

TERMINAL_STATUSES: frozenset[LoanStatus] = frozenset(
    {LoanStatus.CANCELLED, LoanStatus.DONE},
)

RECEIVED_PRIORITY: tuple[LoanStatus, ...] = (
    LoanStatus.PENDING, LoanStatus.APPROVED, LoanStatus.DONE, LoanStatus.CANCELLED,
)
BORROWED_PRIORITY: tuple[LoanStatus, ...] = (
    LoanStatus.APPROVED, LoanStatus.PENDING, LoanStatus.DONE, LoanStatus.CANCELLED,
)


def parse_action(action: str) -> LoanAction:
    """Map a raw action name to LoanAction or raise InputValidationError."""
    try:
        return LoanAction(action)
    except ValueError:
        raise InputValidationError(f"Invalid action: {action}", "action") from None


def validate_loan_request(
    borrower_id: int,
    owner_id: int,
    start_date: date | None,
    due_date: date | None,
    message: str | None,
) -> None:
    """Rules for a new loan request. Book existence is checked by the caller."""
    if borrower_id == owner_id:
        raise SelfLoanError(ErrorContext(user_id=borrower_id))
    if start_date is not None and due_date is not None and due_date < start_date:
        raise InputValidationError(
            "Due date must be after start date", "due_date",
        )
    if message is not None and len(message) > MAX_LOAN_MESSAGE_LENGTH:
        raise InputValidationError(
            f"Message too long (max {MAX_LOAN_MESSAGE_LENGTH} characters)",
            "message",
        )


def check_owner(loan: LoanRecord, acting_user_id: int) -> None:
    """Only the book owner may drive a loan through its lifecycle."""
    if loan.owner_id != acting_user_id:
        raise PermissionDeniedError(
            "You can only modify loans for your own books",
            ErrorContext(user_id=acting_user_id, loan_id=loan.id),
        )


def check_transition(loan: LoanRecord, action: LoanAction) -> Transition:
    """Return the transition for `action` if the loan's status allows it."""
    transition = TRANSITIONS[action]
    if loan.status != transition.required:
        raise InvalidTransitionError(
            action.value, loan.status.value,
            ErrorContext(loan_id=loan.id, action=action.value),
        )
    return transition


def validate_transition(
    loan: LoanRecord, acting_user_id: int, action: LoanAction,
) -> Transition:
    """Chain ownership then status checks. First error wins."""
    check_owner(loan, acting_user_id)
    return check_transition(loan, action)


def side_field_values(transition: Transition, today: date) -> dict[str, date]:
    """Columns a transition stamps, keyed by column name."""
    if transition.stamps is None:
        return {}
    return {transition.stamps.value: today}


def status_rank(priority: tuple[LoanStatus, ...]) -> dict[str, int]:
    """Map each status value to its sort position for a role's listing."""
    return {status.value: i for i, status in enumerate(priority)}
