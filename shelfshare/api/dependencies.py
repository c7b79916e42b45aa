"""Dependency Wiring — builds the trust core per request.

Invariants:
    - One TokenService per process, built from settings (secret immutable after startup)
    - require_identity runs before any route body that mutates state; on failure the
      AuthenticationError propagates and the route never executes
    - Ledger, gate and stores are per-request: they share the request's AsyncSession

Design Decisions:
    - FastAPI Depends over a service locator: tests swap collaborators with
      app.dependency_overrides
"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.config import get_settings
from shelfshare.core.domain_types import Identity
from shelfshare.core.token_service import TokenService
from shelfshare.infrastructure.book_store import SqlBookStore
from shelfshare.infrastructure.database import get_db
from shelfshare.infrastructure.loan_store import SqlLoanStore
from shelfshare.infrastructure.review_store import SqlReviewStore
from shelfshare.infrastructure.user_store import SqlUserStore
from shelfshare.services.accounts import AccountService
from shelfshare.services.auth_gate import AuthGate
from shelfshare.services.loan_ledger import LoanLedger
from shelfshare.services.review_gate import ReviewGate


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.secret_key, ttl_seconds=settings.token_ttl_seconds)


def get_auth_gate(
    tokens: TokenService = Depends(get_token_service),
) -> AuthGate:
    return AuthGate(tokens)


def require_identity(
    request: Request, gate: AuthGate = Depends(get_auth_gate),
) -> Identity:
    """Verified caller identity, or AuthenticationError (401)."""
    return gate.authenticate(request.headers)


def get_loan_ledger(db: AsyncSession = Depends(get_db)) -> LoanLedger:
    return LoanLedger(SqlLoanStore(db), SqlBookStore(db))


def get_review_gate(db: AsyncSession = Depends(get_db)) -> ReviewGate:
    return ReviewGate(SqlReviewStore(db), SqlLoanStore(db))


def get_account_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(SqlUserStore(db), tokens)
