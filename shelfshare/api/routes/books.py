"""Book Routes — the public catalogue, plus owner-only edits and deletion.

Invariants:
    - Reads are public; create/update/delete require an identity
    - Update and delete are owner-only (core/enforce_books.check_book_owner)
    - Update is partial: omitted fields keep their stored value
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.api.dependencies import require_identity
from shelfshare.core.domain_types import Identity
from shelfshare.core.enforce_books import (
    check_book_owner, provided_changes, validate_book_fields,
)
from shelfshare.core.errors import ResourceNotFoundError
from shelfshare.infrastructure.book_store import SqlBookStore
from shelfshare.infrastructure.database import get_db
from shelfshare.models.book import Book
from shelfshare.schemas.book import BookCreate, BookResponse, BookUpdate

router = APIRouter(prefix="/api/v1/books", tags=["books"])


def to_book_response(book: Book, owner_username: str | None = None) -> BookResponse:
    return BookResponse(
        id=book.id, title=book.title, author=book.author, isbn=book.isbn,
        description=book.description, owner_id=book.owner_id,
        owner_username=owner_username, created_at=book.created_at,
    )


async def get_book_or_404(book_id: int, store: SqlBookStore) -> Book:
    book = await store.get(book_id)
    if not book:
        raise ResourceNotFoundError("Book", str(book_id))
    return book


@router.get("", response_model=list[BookResponse])
async def list_books(db: AsyncSession = Depends(get_db)):
    """The whole catalogue, newest first. Public."""
    rows = await SqlBookStore(db).list_all()
    return [to_book_response(book, username) for book, username in rows]


@router.post(
    "", response_model=BookResponse, status_code=status.HTTP_201_CREATED,
)
async def create_book(
    body: BookCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    validate_book_fields(body.title, body.isbn)
    book = await SqlBookStore(db).create(
        owner_id=identity.user_id, title=body.title, author=body.author,
        isbn=body.isbn, description=body.description,
    )
    return to_book_response(book, identity.username)


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: int, db: AsyncSession = Depends(get_db)):
    return to_book_response(await get_book_or_404(book_id, SqlBookStore(db)))


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    body: BookUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = SqlBookStore(db)
    book = await get_book_or_404(book_id, store)
    check_book_owner(book.owner_id, identity.user_id, "update")
    validate_book_fields(body.title, body.isbn)

    changes = provided_changes(**body.model_dump())
    book = await store.update(book, changes)
    return to_book_response(book, identity.username)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete a book and, by cascade, its loans and their reviews."""
    store = SqlBookStore(db)
    book = await get_book_or_404(book_id, store)
    check_book_owner(book.owner_id, identity.user_id, "delete")
    await store.delete(book)
