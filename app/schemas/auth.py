"""Request/response schemas for account, login, password reset and CSRF endpoints."""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    TEL_MAX_LEN,
)

Role = Literal["user", "admin"]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    """Strip and lowercase an email; reject anything that is not shaped like one."""
    normalized = (value or "").strip().lower()
    if not _EMAIL_RE.match(normalized):
        raise ValueError("Please add a valid email")
    return normalized


class RegisterRequest(BaseModel):
    """New local account. Self-registration always gets the user role; any role in the body is ignored."""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    email: str = Field(..., max_length=EMAIL_MAX_LEN)
    tel: str = Field(..., min_length=1, max_length=TEL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("name", "tel")
    @classmethod
    def strip_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be non-empty")
        return v.strip()


class LoginRequest(BaseModel):
    """Credentials for login. Lengths are checked loosely so every bad login looks the same."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LEN)
    tel: str | None = Field(default=None, min_length=1, max_length=TEL_MAX_LEN)
    role: Role | None = None


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ResetPasswordRequest(BaseModel):
    """New password for a reset token; the route rejects a mismatched confirmation."""

    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    confirm_password: str = Field(..., alias="confirmPassword", max_length=PASSWORD_MAX_LEN)


class TokenResponse(BaseModel):
    """Login/register/reset result: identity token plus the fields the frontend shows."""

    success: bool = True
    id: int = Field(..., serialization_alias="_id")
    name: str
    email: str
    token: str = Field(..., description="JWT identity token; also set as an HttpOnly cookie")


class CurrentUser(BaseModel):
    """Authenticated principal (id, role) plus display fields, for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: Role


class UserOut(BaseModel):
    """Public view of a user (no password hash or reset fields)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., serialization_alias="_id")
    name: str
    email: str
    tel: str
    role: Role


class UserResponse(BaseModel):
    success: bool = True
    data: UserOut


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    success: bool = True
    count: int
    data: list[UserOut]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class CsrfTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    csrf_token: str = Field(..., serialization_alias="csrfToken")
