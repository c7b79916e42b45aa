"""Book Store — SQLAlchemy persistence for books.

Invariants:
    - get_owner_id is the only read the loan ledger performs on books
    - update writes only the columns it is given
    - delete relies on ORM cascade: loans and their reviews go with the book
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.core.domain_types import BookId, UserId
from shelfshare.models.book import Book
from shelfshare.models.user import User

logger = logging.getLogger(__name__)


class SqlBookStore:
    """BookRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, book_id: int) -> Book | None:
        result = await self.db.execute(select(Book).where(Book.id == book_id))
        return result.scalar_one_or_none()

    async def get_owner_id(self, book_id: BookId) -> UserId | None:
        result = await self.db.execute(
            select(Book.owner_id).where(Book.id == book_id),
        )
        owner_id = result.scalar_one_or_none()
        return UserId(owner_id) if owner_id is not None else None

    async def create(
        self,
        owner_id: UserId,
        title: str,
        author: str | None = None,
        isbn: str | None = None,
        description: str | None = None,
    ) -> Book:
        book = Book(
            owner_id=owner_id, title=title, author=author,
            isbn=isbn, description=description,
        )
        self.db.add(book)
        await self.db.commit()
        await self.db.refresh(book)
        return book

    async def list_all(self) -> list[tuple[Book, str]]:
        """Every book with its owner's username, newest first."""
        result = await self.db.execute(
            select(Book, User.username)
            .join(User, User.id == Book.owner_id)
            .order_by(Book.created_at.desc(), Book.id.desc()),
        )
        return [(book, username) for book, username in result.all()]

    async def list_by_owner(self, owner_id: int) -> list[Book]:
        result = await self.db.execute(
            select(Book)
            .where(Book.owner_id == owner_id)
            .order_by(Book.created_at.desc(), Book.id.desc()),
        )
        return list(result.scalars().all())

    async def update(self, book: Book, changes: dict) -> Book:
        """Apply a partial update; columns absent from `changes` keep their value."""
        for column, value in changes.items():
            setattr(book, column, value)
        await self.db.commit()
        await self.db.refresh(book)
        logger.info(
            "Book updated",
            extra={"book_id": book.id, "action": ",".join(sorted(changes))},
        )
        return book

    async def delete(self, book: Book) -> None:
        book_id = book.id
        await self.db.delete(book)
        await self.db.commit()
        logger.info("Book deleted", extra={"book_id": book_id})
