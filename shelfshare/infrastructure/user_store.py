"""User Store — SQLAlchemy persistence for accounts.

Invariants:
    - UNIQUE(username) and UNIQUE(email) are the final arbiters of account identity;
      an IntegrityError that a re-read explains is reported as DuplicateAccountError
    - update writes only the columns it is given
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfshare.core.errors import DuplicateAccountError
from shelfshare.models.user import User

logger = logging.getLogger(__name__)


class SqlUserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username),
        )
        return result.scalar_one_or_none()

    async def _duplicate_field(
        self, username: str | None, email: str | None, user_id: int | None = None,
    ) -> str | None:
        """Which unique field, if any, another account already holds."""
        if username is not None:
            holder = await self.get_by_username(username)
            if holder and holder.id != user_id:
                return "username"
        if email is not None:
            holder = await self.get_by_email(email)
            if holder and holder.id != user_id:
                return "email"
        return None

    async def _commit_or_conflict(
        self, username: str | None, email: str | None, user_id: int | None = None,
    ) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            field = await self._duplicate_field(username, email, user_id)
            if field is None:
                raise
            logger.warning(
                f"Concurrent account write lost the unique race on {field}",
                extra={"user_id": user_id},
            )
            raise DuplicateAccountError(field) from None

    async def create(self, username: str, email: str, password_hash: str) -> User:
        user = User(username=username, email=email, password_hash=password_hash)
        self.db.add(user)
        await self._commit_or_conflict(username, email)
        await self.db.refresh(user)
        return user

    async def update(self, user: User, changes: dict) -> User:
        user_id = user.id
        for column, value in changes.items():
            setattr(user, column, value)
        await self._commit_or_conflict(changes.get("username"), None, user_id)
        await self.db.refresh(user)
        return user
