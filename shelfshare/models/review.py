"""Review ORM — a rating left by one loan participant about the other.

Invariants:
    - loan_id is UNIQUE: at most one review per loan
    - rating in [1, 5] (CHECK constraint)
    - reviewer_id != rated_user_id (CHECK constraint)
"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Integer, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfshare.db.base import Base


class Review(Base):
    """Review entity — immutable after creation."""
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating"),
        CheckConstraint("reviewer_id <> rated_user_id", name="check_not_self"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    loan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("loans.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    reviewer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    rated_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    loan: Mapped["Loan"] = relationship("Loan", back_populates="review")
