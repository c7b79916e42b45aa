"""Loan Schemas — loan request input and loan views.

Invariants:
    - Dates are ISO `YYYY-MM-DD`; ordering and message length are checked by LoanLedger
"""

from dataclasses import asdict
from datetime import date, datetime

from pydantic import BaseModel, Field

from shelfshare.core.domain_types import LoanRecord, LoanStatus


class LoanRequest(BaseModel):
    book_id: int = Field(gt=0)
    start_date: date | None = None
    due_date: date | None = None
    message: str | None = None


class LoanCreated(BaseModel):
    message: str = "Loan request created successfully"
    loan_id: int


class LoanResponse(BaseModel):
    id: int
    book_id: int
    book_title: str | None = None
    borrower_id: int
    owner_id: int
    status: LoanStatus
    start_date: date | None
    due_date: date | None
    return_date: date | None
    message: str | None
    created_at: datetime | None

    @classmethod
    def from_record(cls, record: LoanRecord) -> "LoanResponse":
        return cls(**asdict(record))


class LoanTransitioned(BaseModel):
    message: str
    loan: LoanResponse
