"""Book Schemas — catalogue payloads.

Invariants:
    - Shape only (types, lengths); title and ISBN rules live in core/enforce_books
    - BookUpdate fields are all optional; an omitted or null field is left unchanged
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class BookCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    author: str | None = Field(None, max_length=255)
    isbn: str | None = Field(None, max_length=20)
    description: str | None = Field(None, max_length=5000)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v


class BookUpdate(BaseModel):
    title: str | None = Field(None, max_length=255)
    author: str | None = Field(None, max_length=255)
    isbn: str | None = Field(None, max_length=20)
    description: str | None = Field(None, max_length=5000)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v


class BookResponse(BaseModel):
    id: int
    title: str
    author: str | None
    isbn: str | None
    description: str | None
    owner_id: int
    owner_username: str | None = None
    created_at: datetime
