"""Auth Schemas — registration, login, and profile payloads."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    """Registration — username 3-50 word chars, password at least 8 chars."""
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_]+$")
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(BaseModel):
    """Partial profile edit. Omitted or null fields are left unchanged."""
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    username: str | None = Field(
        None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_]+$",
    )
    password: str | None = Field(None, min_length=8, max_length=128)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class UserResponse(BaseModel):
    """The caller's own account data, email included."""
    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None


class PublicUserResponse(BaseModel):
    """Another user's profile as anyone may see it. No email."""
    id: int
    username: str
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
