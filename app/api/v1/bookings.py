"""Booking routes: list, read, update and delete with owner-or-admin access."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.booking import (
    BookingOut,
    BookingResponse,
    BookingsListResponse,
    BookingUpdate,
    DeletedResponse,
)
from app.services import bookings

router = APIRouter()


@router.get("", response_model=BookingsListResponse)
def list_bookings(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> BookingsListResponse:
    """Admins see every booking; everyone else sees only their own."""
    bookings.sweep_expired(db, settings)
    items = bookings.list_bookings(db, current_user)
    return BookingsListResponse(
        count=len(items), data=[BookingOut.model_validate(b) for b in items]
    )


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> BookingResponse:
    bookings.sweep_expired(db, settings)
    booking = bookings.get_booking(db, booking_id, current_user)
    return BookingResponse(data=BookingOut.model_validate(booking))


@router.put("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    body: BookingUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> BookingResponse:
    """Change check-in and/or check-out; the resulting stay is validated as a whole."""
    booking = bookings.update_booking(
        db,
        booking_id,
        current_user,
        check_in=body.check_in,
        check_out=body.check_out,
    )
    return BookingResponse(data=BookingOut.model_validate(booking))


@router.delete("/{booking_id}", response_model=DeletedResponse)
def delete_booking(
    booking_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> DeletedResponse:
    bookings.delete_booking(db, booking_id, current_user)
    return DeletedResponse()
