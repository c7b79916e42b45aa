"""Loan Enforcement — tests for the pure loan state machine rules.

Tests cover:
    - validate_loan_request: self-loan, date order, message bound
    - check_owner / check_transition / validate_transition ordering
    - TRANSITIONS table: no edge targets PENDING, terminal states have no edges
    - side_field_values stamps the right column
    - parse_action rejects unknown actions
"""

from datetime import date

import pytest

from shelfshare.core.domain_types import (
    BookId, LoanAction, LoanId, LoanRecord, LoanStatus, UserId,
    MAX_LOAN_MESSAGE_LENGTH,
)
from shelfshare.core.enforce_loans import (
    BORROWED_PRIORITY,
    RECEIVED_PRIORITY,
    TERMINAL_STATUSES,
    TRANSITIONS,
    check_owner,
    check_transition,
    parse_action,
    side_field_values,
    status_rank,
    validate_loan_request,
    validate_transition,
)
from shelfshare.core.errors import (
    InputValidationError,
    InvalidTransitionError,
    PermissionDeniedError,
    SelfLoanError,
)


def _loan(status: LoanStatus, owner: int = 1, borrower: int = 2) -> LoanRecord:
    return LoanRecord(
        id=LoanId(12), book_id=BookId(5),
        borrower_id=UserId(borrower), owner_id=UserId(owner),
        status=status, start_date=None, due_date=None,
        return_date=None, message=None,
    )


# ─── validate_loan_request ───────────────────────────────────────

def test_request_accepts_minimal_input():
    assert validate_loan_request(2, 1, None, None, None) is None


def test_request_rejects_own_book():
    with pytest.raises(SelfLoanError) as exc:
        validate_loan_request(1, 1, None, None, None)
    assert exc.value.http_status == 400


def test_request_rejects_due_before_start():
    with pytest.raises(InputValidationError) as exc:
        validate_loan_request(2, 1, date(2026, 5, 10), date(2026, 5, 9), None)
    assert exc.value.field == "due_date"


def test_request_accepts_same_day_start_and_due():
    validate_loan_request(2, 1, date(2026, 5, 10), date(2026, 5, 10), None)


def test_request_accepts_single_date():
    validate_loan_request(2, 1, None, date(2026, 5, 9), None)
    validate_loan_request(2, 1, date(2026, 5, 9), None, None)


def test_request_message_bound():
    validate_loan_request(2, 1, None, None, "x" * MAX_LOAN_MESSAGE_LENGTH)
    with pytest.raises(InputValidationError) as exc:
        validate_loan_request(2, 1, None, None, "x" * (MAX_LOAN_MESSAGE_LENGTH + 1))
    assert exc.value.field == "message"


# ─── transitions ─────────────────────────────────────────────────

@pytest.mark.parametrize("action, required, result", [
    (LoanAction.APPROVE, LoanStatus.PENDING, LoanStatus.APPROVED),
    (LoanAction.DECLINE, LoanStatus.PENDING, LoanStatus.CANCELLED),
    (LoanAction.COMPLETE, LoanStatus.APPROVED, LoanStatus.DONE),
])
def test_transition_table(action, required, result):
    assert TRANSITIONS[action].required == required
    assert TRANSITIONS[action].result == result


def test_no_transition_returns_to_pending():
    assert all(t.result != LoanStatus.PENDING for t in TRANSITIONS.values())


def test_terminal_statuses_have_no_outgoing_edges():
    assert all(t.required not in TERMINAL_STATUSES for t in TRANSITIONS.values())


@pytest.mark.parametrize("status", list(TERMINAL_STATUSES))
@pytest.mark.parametrize("action", list(LoanAction))
def test_terminal_loans_reject_every_action(status, action):
    with pytest.raises(InvalidTransitionError):
        check_transition(_loan(status), action)


def test_complete_requires_approved():
    with pytest.raises(InvalidTransitionError) as exc:
        check_transition(_loan(LoanStatus.PENDING), LoanAction.COMPLETE)
    assert exc.value.message == "Cannot complete loan with status: pending"


def test_approve_pending_returns_transition():
    transition = check_transition(_loan(LoanStatus.PENDING), LoanAction.APPROVE)
    assert transition.result == LoanStatus.APPROVED


def test_borrower_cannot_drive_loan():
    with pytest.raises(PermissionDeniedError):
        check_owner(_loan(LoanStatus.APPROVED, owner=1, borrower=2), 2)


def test_borrower_cannot_complete_approved_loan():
    with pytest.raises(PermissionDeniedError):
        validate_transition(_loan(LoanStatus.APPROVED), 2, LoanAction.COMPLETE)


def test_owner_can_complete_approved_loan():
    transition = validate_transition(_loan(LoanStatus.APPROVED), 1, LoanAction.COMPLETE)
    assert transition.result == LoanStatus.DONE


def test_ownership_checked_before_status():
    # A stranger gets 403 even when the status would also be wrong
    with pytest.raises(PermissionDeniedError):
        validate_transition(_loan(LoanStatus.DONE), 99, LoanAction.APPROVE)


# ─── side fields ─────────────────────────────────────────────────

def test_approve_stamps_start_date_only_if_missing():
    transition = TRANSITIONS[LoanAction.APPROVE]
    assert side_field_values(transition, date(2026, 1, 2)) == {
        "start_date": date(2026, 1, 2),
    }
    assert transition.keep_existing is True


def test_complete_stamps_return_date():
    transition = TRANSITIONS[LoanAction.COMPLETE]
    assert side_field_values(transition, date(2026, 1, 2)) == {
        "return_date": date(2026, 1, 2),
    }
    assert transition.keep_existing is False


def test_decline_stamps_nothing():
    assert side_field_values(TRANSITIONS[LoanAction.DECLINE], date(2026, 1, 2)) == {}


# ─── parse_action / ordering ─────────────────────────────────────

def test_parse_action_accepts_known_actions():
    assert parse_action("approve") == LoanAction.APPROVE


def test_parse_action_rejects_unknown():
    with pytest.raises(InputValidationError):
        parse_action("reopen")


def test_received_priority_puts_pending_first():
    assert status_rank(RECEIVED_PRIORITY) == {
        "pending": 0, "approved": 1, "done": 2, "cancelled": 3,
    }


def test_borrowed_priority_puts_approved_first():
    assert status_rank(BORROWED_PRIORITY) == {
        "approved": 0, "pending": 1, "done": 2, "cancelled": 3,
    }
