"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Deleting a book cascades to its loans, and a loan to its review

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from shelfshare.models.user import User  # noqa: F401
from shelfshare.models.book import Book  # noqa: F401
from shelfshare.models.loan import Loan  # noqa: F401
from shelfshare.models.review import Review  # noqa: F401
