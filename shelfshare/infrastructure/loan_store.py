"""Loan Store — SQLAlchemy persistence for loans, including the conditional transition write.

Invariants:
    - transition_if issues ONE UPDATE guarded by (id, owner_id, status = required);
      success is decided by the affected row count, never by a prior read
    - get() always refreshes from the database (populate_existing): no stale status
      survives in the session identity map
    - Listings are ordered by role-specific status priority, then created_at DESC, id DESC

Design Decisions:
    - Core UPDATE over ORM attribute mutation: the compare-and-swap must happen in the
      database, where concurrent requests serialize on the row lock
    - start_date stamped with COALESCE so a borrower-proposed start date survives approval
"""

from datetime import date, datetime, timezone

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.core.domain_types import (
    BookId, LoanId, LoanRecord, LoanStatus, UserId,
)
from shelfshare.core.enforce_loans import Transition, side_field_values, status_rank
from shelfshare.models.book import Book
from shelfshare.models.loan import Loan


def _to_record(loan: Loan, book_title: str | None = None) -> LoanRecord:
    return LoanRecord(
        id=LoanId(loan.id),
        book_id=BookId(loan.book_id),
        borrower_id=UserId(loan.borrower_id),
        owner_id=UserId(loan.owner_id),
        status=LoanStatus(loan.status),
        start_date=loan.start_date,
        due_date=loan.due_date,
        return_date=loan.return_date,
        message=loan.message,
        created_at=loan.created_at,
        book_title=book_title,
    )


class SqlLoanStore:
    """LoanRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        book_id: BookId,
        borrower_id: UserId,
        owner_id: UserId,
        start_date: date | None,
        due_date: date | None,
        message: str | None,
    ) -> LoanId:
        loan = Loan(
            book_id=book_id,
            borrower_id=borrower_id,
            owner_id=owner_id,
            status=LoanStatus.PENDING.value,
            start_date=start_date,
            due_date=due_date,
            message=message,
        )
        self.db.add(loan)
        await self.db.commit()
        return LoanId(loan.id)

    async def get(self, loan_id: LoanId) -> LoanRecord | None:
        result = await self.db.execute(
            select(Loan)
            .where(Loan.id == loan_id)
            .execution_options(populate_existing=True),
        )
        loan = result.scalar_one_or_none()
        return _to_record(loan) if loan else None

    async def transition_if(
        self,
        loan_id: LoanId,
        owner_id: UserId,
        transition: Transition,
        today: date,
    ) -> bool:
        values: dict = {
            "status": transition.result.value,
            "updated_at": datetime.now(timezone.utc),
        }
        for column, stamp in side_field_values(transition, today).items():
            if transition.keep_existing:
                values[column] = func.coalesce(getattr(Loan, column), stamp)
            else:
                values[column] = stamp

        result = await self.db.execute(
            update(Loan)
            .where(
                Loan.id == loan_id,
                Loan.owner_id == owner_id,
                Loan.status == transition.required.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        return result.rowcount == 1

    async def _list(self, where_clause, priority: tuple[LoanStatus, ...]) -> list[LoanRecord]:
        rank = case(status_rank(priority), value=Loan.status, else_=len(priority))
        result = await self.db.execute(
            select(Loan, Book.title)
            .join(Book, Book.id == Loan.book_id)
            .where(where_clause)
            .order_by(rank, Loan.created_at.desc(), Loan.id.desc()),
        )
        return [_to_record(loan, title) for loan, title in result.all()]

    async def list_received(
        self, owner_id: UserId, priority: tuple[LoanStatus, ...],
    ) -> list[LoanRecord]:
        return await self._list(Loan.owner_id == owner_id, priority)

    async def list_borrowed(
        self, borrower_id: UserId, priority: tuple[LoanStatus, ...],
    ) -> list[LoanRecord]:
        return await self._list(Loan.borrower_id == borrower_id, priority)
