"""Loan ORM — one borrow transaction between an owner and a borrower.

Invariants:
    - owner_id is copied from the book at creation and never updated
    - status is one of pending/approved/cancelled/done (CHECK constraint)
    - due_date >= start_date when both are present (CHECK constraint)
    - return_date is set only by the complete transition

Design Decisions:
    - owner_id denormalized from books: the conditional transition UPDATE can
      guard on (id, owner_id, status) without a join
    - status stored as String + CHECK rather than a native ENUM: same DDL on
      PostgreSQL and the SQLite test database
"""

from datetime import date, datetime, timezone

from sqlalchemy import (
    CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfshare.db.base import Base


class Loan(Base):
    """Loan entity — state machine persisted row."""
    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'cancelled', 'done')",
            name="check_status",
        ),
        CheckConstraint(
            "start_date IS NULL OR due_date IS NULL OR due_date >= start_date",
            name="check_dates",
        ),
        Index("idx_loans_status_owner", "status", "owner_id"),
        Index("idx_loans_status_borrower", "status", "borrower_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    borrower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    return_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    book: Mapped["Book"] = relationship("Book", back_populates="loans")
    review: Mapped["Review"] = relationship(
        "Review", back_populates="loan", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
