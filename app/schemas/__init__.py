"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CsrfTokenResponse,
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserOut,
    UserResponse,
    UsersListResponse,
)
from app.schemas.booking import (
    BookingCreate,
    BookingOut,
    BookingResponse,
    BookingsListResponse,
    BookingUpdate,
    DeletedResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.hotel import (
    HotelCreate,
    HotelOut,
    HotelResponse,
    HotelsListResponse,
    HotelUpdate,
)

__all__ = [
    "BookingCreate",
    "BookingOut",
    "BookingResponse",
    "BookingUpdate",
    "BookingsListResponse",
    "CsrfTokenResponse",
    "CurrentUser",
    "DeletedResponse",
    "ForgotPasswordRequest",
    "HealthResponse",
    "HotelCreate",
    "HotelOut",
    "HotelResponse",
    "HotelUpdate",
    "HotelsListResponse",
    "LoginRequest",
    "MessageResponse",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    "UserOut",
    "UserResponse",
    "UsersListResponse",
]
