"""Hotel routes (public read, admin write) and the nested booking routes of a hotel."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, require_admin, require_roles
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.models.user import ROLE_ADMIN, ROLE_USER
from app.schemas.auth import CurrentUser
from app.schemas.booking import (
    BookingCreate,
    BookingOut,
    BookingResponse,
    BookingsListResponse,
    DeletedResponse,
)
from app.schemas.hotel import (
    HotelCreate,
    HotelOut,
    HotelResponse,
    HotelsListResponse,
    HotelUpdate,
)
from app.services import bookings, hotels

router = APIRouter()


@router.get("", response_model=HotelsListResponse)
def list_hotels(db: Annotated[Session, Depends(get_db)]) -> HotelsListResponse:
    items = hotels.list_hotels(db)
    return HotelsListResponse(count=len(items), data=[HotelOut.model_validate(h) for h in items])


@router.get("/{hotel_id}", response_model=HotelResponse)
def get_hotel(hotel_id: int, db: Annotated[Session, Depends(get_db)]) -> HotelResponse:
    return HotelResponse(data=HotelOut.model_validate(hotels.get_hotel(db, hotel_id)))


@router.post("", response_model=HotelResponse, status_code=status.HTTP_201_CREATED)
def create_hotel(
    body: HotelCreate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> HotelResponse:
    hotel = hotels.create_hotel(db, body.name, body.address, body.tel, body.picture)
    return HotelResponse(data=HotelOut.model_validate(hotel))


@router.put("/{hotel_id}", response_model=HotelResponse)
def update_hotel(
    hotel_id: int,
    body: HotelUpdate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> HotelResponse:
    hotel = hotels.update_hotel(db, hotel_id, body.model_dump(exclude_unset=True))
    return HotelResponse(data=HotelOut.model_validate(hotel))


@router.delete("/{hotel_id}", response_model=DeletedResponse)
def delete_hotel(
    hotel_id: int,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DeletedResponse:
    """Delete a hotel together with its bookings (admin only)."""
    hotels.delete_hotel(db, hotel_id)
    return DeletedResponse()


@router.post("/{hotel_id}/bookings", response_model=BookingResponse)
def create_booking(
    hotel_id: int,
    body: BookingCreate,
    current_user: Annotated[CurrentUser, Depends(require_roles(ROLE_ADMIN, ROLE_USER))],
    db: Annotated[Session, Depends(get_db)],
) -> BookingResponse:
    """
    Book the hotel for the current user. Check-in must be today or later and the
    stay 1 to 3 nights; the night count is computed here.
    """
    booking = bookings.create_booking(
        db, hotel_id, current_user, body.check_in, body.check_out
    )
    return BookingResponse(data=BookingOut.model_validate(booking))


@router.get("/{hotel_id}/bookings", response_model=BookingsListResponse)
def list_hotel_bookings(
    hotel_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> BookingsListResponse:
    """The hotel's bookings: all of them for admins, only your own otherwise."""
    bookings.sweep_expired(db, settings)
    items = bookings.list_bookings(db, current_user, hotel_id=hotel_id)
    return BookingsListResponse(
        count=len(items), data=[BookingOut.model_validate(b) for b in items]
    )
