"""Loan Routes — request, list, inspect, and transition loans.

Invariants:
    - Every endpoint requires an authenticated identity
    - The acting user is always the token subject, never a body field
    - Status changes go through LoanLedger.transition only
"""

from fastapi import APIRouter, Depends, status

from shelfshare.api.dependencies import get_loan_ledger, require_identity
from shelfshare.core.domain_types import BookId, Identity, LoanAction, LoanId
from shelfshare.schemas.loan import (
    LoanCreated, LoanRequest, LoanResponse, LoanTransitioned,
)
from shelfshare.services.loan_ledger import LoanLedger

router = APIRouter(prefix="/api/v1/loans", tags=["loans"])

_PAST_TENSE = {
    LoanAction.APPROVE: "approved",
    LoanAction.DECLINE: "declined",
    LoanAction.COMPLETE: "completed",
}


@router.post(
    "/request", response_model=LoanCreated,
    status_code=status.HTTP_201_CREATED,
)
async def request_loan(
    body: LoanRequest,
    identity: Identity = Depends(require_identity),
    ledger: LoanLedger = Depends(get_loan_ledger),
):
    loan_id = await ledger.request_loan(
        BookId(body.book_id), identity.user_id,
        start_date=body.start_date, due_date=body.due_date, message=body.message,
    )
    return LoanCreated(loan_id=loan_id)


@router.get("/received", response_model=list[LoanResponse])
async def received_loans(
    identity: Identity = Depends(require_identity),
    ledger: LoanLedger = Depends(get_loan_ledger),
):
    """Loan requests on the caller's books, actionable first."""
    loans = await ledger.received_for(identity.user_id)
    return [LoanResponse.from_record(l) for l in loans]


@router.get("/my-borrowed", response_model=list[LoanResponse])
async def my_borrowed_loans(
    identity: Identity = Depends(require_identity),
    ledger: LoanLedger = Depends(get_loan_ledger),
):
    """Loans the caller requested, active first."""
    loans = await ledger.borrowed_by(identity.user_id)
    return [LoanResponse.from_record(l) for l in loans]


@router.get("/{loan_id}", response_model=LoanResponse)
async def get_loan(
    loan_id: int,
    identity: Identity = Depends(require_identity),
    ledger: LoanLedger = Depends(get_loan_ledger),
):
    loan = await ledger.get_for_participant(LoanId(loan_id), identity.user_id)
    return LoanResponse.from_record(loan)


@router.put("/{loan_id}/{action}", response_model=LoanTransitioned)
async def transition_loan(
    loan_id: int,
    action: LoanAction,
    identity: Identity = Depends(require_identity),
    ledger: LoanLedger = Depends(get_loan_ledger),
):
    """approve | decline | complete — owner only."""
    loan = await ledger.transition(LoanId(loan_id), identity.user_id, action)
    return LoanTransitioned(
        message=f"Loan {_PAST_TENSE[action]} successfully",
        loan=LoanResponse.from_record(loan),
    )
