"""Auth Routes — register, login (token issuance), and the caller's own profile and shelf."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.api.dependencies import get_account_service, require_identity
from shelfshare.api.routes.books import to_book_response
from shelfshare.config import get_settings
from shelfshare.core.domain_types import Identity
from shelfshare.core.errors import ResourceNotFoundError
from shelfshare.infrastructure.book_store import SqlBookStore
from shelfshare.infrastructure.database import get_db
from shelfshare.infrastructure.user_store import SqlUserStore
from shelfshare.models.user import User
from shelfshare.schemas.auth import (
    LoginRequest, ProfileUpdate, RegisterRequest, TokenResponse, UserResponse,
)
from shelfshare.schemas.book import BookResponse
from shelfshare.services.accounts import AccountService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id, username=user.username, email=user.email,
        first_name=user.first_name, last_name=user.last_name,
    )


@router.post(
    "/register", response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    user = await accounts.register(body.username, body.email, body.password)
    return to_user_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    token, user = await accounts.login(body.email, body.password)
    return TokenResponse(
        access_token=token,
        expires_in=get_settings().token_ttl_seconds,
        user=to_user_response(user),
    )


@router.get("/me", response_model=UserResponse)
async def me(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """Profile of the authenticated caller."""
    user = await SqlUserStore(db).get_by_id(identity.user_id)
    if not user:
        raise ResourceNotFoundError("User", str(identity.user_id))
    return to_user_response(user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    body: ProfileUpdate,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    user = await accounts.update_profile(
        identity.user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        username=body.username,
        password=body.password,
    )
    return to_user_response(user)


@router.get("/me/books", response_model=list[BookResponse])
async def my_books(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    user = await SqlUserStore(db).get_by_id(identity.user_id)
    if not user:
        raise ResourceNotFoundError("User", str(identity.user_id))
    books = await SqlBookStore(db).list_by_owner(user.id)
    return [to_book_response(book, user.username) for book in books]
