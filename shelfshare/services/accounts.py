"""Accounts — registration, credential login that issues identity tokens, profile edits.

Invariants:
    - Passwords are stored only as werkzeug salted hashes
    - A username belongs to at most one account; renaming to your own name is a no-op
    - Login failure never reveals whether the email exists
    - Tokens carry exactly {id, email, username} plus iat/exp from TokenService
"""

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from shelfshare.core.enforce_books import provided_changes
from shelfshare.core.errors import (
    AuthenticationError, DuplicateAccountError, ResourceNotFoundError,
)
from shelfshare.core.token_service import TokenService
from shelfshare.core.repository_protocols import UserRepository
from shelfshare.models.user import User

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, users: UserRepository, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    async def register(self, username: str, email: str, password: str) -> User:
        if await self.users.get_by_username(username):
            raise DuplicateAccountError("username")
        if await self.users.get_by_email(email):
            raise DuplicateAccountError("email")

        user = await self.users.create(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
        )
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def login(self, email: str, password: str) -> tuple[str, User]:
        user = await self.users.get_by_email(email)
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid credentials")

        token = self.tokens.issue(user.id, user.email, user.username)
        logger.info("User logged in", extra={"user_id": user.id})
        return token, user

    async def update_profile(
        self,
        user_id: int,
        first_name: str | None = None,
        last_name: str | None = None,
        username: str | None = None,
        password: str | None = None,
    ) -> User:
        """Partial profile update. Fields left as None keep their stored value.

        Tokens already issued keep the old username until they expire.
        """
        user = await self.users.get_by_id(user_id)
        if not user:
            raise ResourceNotFoundError("User", str(user_id))

        if username is not None and username != user.username:
            holder = await self.users.get_by_username(username)
            if holder and holder.id != user.id:
                raise DuplicateAccountError("username")

        changes = provided_changes(
            first_name=first_name, last_name=last_name, username=username,
        )
        if password is not None:
            changes["password_hash"] = generate_password_hash(password)
        if not changes:
            return user

        user = await self.users.update(user, changes)
        logger.info(
            "Profile updated",
            extra={"user_id": user_id, "action": ",".join(sorted(changes))},
        )
        return user
