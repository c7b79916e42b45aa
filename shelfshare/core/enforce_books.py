"""Book & Profile Enforcement — pure checks for catalogue edits and profile updates.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Only a book's owner may update or delete it
    - Partial updates: a field left as None keeps its stored value, so an update
      can change fields but never clear them
    - ISBNs are ISBN-10 (last digit may be X) or ISBN-13 once hyphens and spaces are removed
"""

import re

from shelfshare.core.errors import (
    ErrorContext,
    InputValidationError,
    PermissionDeniedError,
)

MAX_TITLE_LENGTH: int = 255

_ISBN = re.compile(r"^(?:\d{9}[\dX]|\d{13})$")


def check_book_owner(owner_id: int, acting_user_id: int, verb: str) -> None:
    """Raise unless `acting_user_id` owns the book. `verb` names the attempted edit."""
    if owner_id != acting_user_id:
        raise PermissionDeniedError(
            f"You can only {verb} your own books",
            ErrorContext(user_id=acting_user_id, action=verb),
        )


def is_valid_isbn(isbn: str) -> bool:
    return bool(_ISBN.match(isbn.replace("-", "").replace(" ", "").upper()))


def validate_book_fields(title: str | None, isbn: str | None) -> None:
    if title is not None:
        if not title.strip():
            raise InputValidationError("Title is required", "title")
        if len(title) > MAX_TITLE_LENGTH:
            raise InputValidationError(
                f"Title must be {MAX_TITLE_LENGTH} characters or less", "title",
            )
    if isbn and not is_valid_isbn(isbn):
        raise InputValidationError("Invalid ISBN format", "isbn")


def provided_changes(**fields) -> dict:
    """Keep only the fields the caller actually sent."""
    return {name: value for name, value in fields.items() if value is not None}
