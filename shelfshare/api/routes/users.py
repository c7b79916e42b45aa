"""User Routes — public profiles and shelves of other users.

Invariants:
    - Public: no identity required
    - A public profile never carries the email address
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.api.routes.books import to_book_response
from shelfshare.core.errors import ResourceNotFoundError
from shelfshare.infrastructure.book_store import SqlBookStore
from shelfshare.infrastructure.database import get_db
from shelfshare.infrastructure.user_store import SqlUserStore
from shelfshare.models.user import User
from shelfshare.schemas.auth import PublicUserResponse
from shelfshare.schemas.book import BookResponse

router = APIRouter(prefix="/api/v1/users", tags=["users"])


async def get_user_or_404(user_id: int, db: AsyncSession) -> User:
    user = await SqlUserStore(db).get_by_id(user_id)
    if not user:
        raise ResourceNotFoundError("User", str(user_id))
    return user


@router.get("/{user_id}", response_model=PublicUserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await get_user_or_404(user_id, db)
    return PublicUserResponse(
        id=user.id, username=user.username,
        first_name=user.first_name, last_name=user.last_name,
        created_at=user.created_at,
    )


@router.get("/{user_id}/books", response_model=list[BookResponse])
async def get_user_books(user_id: int, db: AsyncSession = Depends(get_db)):
    """A user's shelf, newest first. 404 if the user does not exist."""
    user = await get_user_or_404(user_id, db)
    books = await SqlBookStore(db).list_by_owner(user.id)
    return [to_book_response(book, user.username) for book in books]
