"""Hotel records: plain create/read/update/delete used by the booking flow."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateKey, HotelNotFound
from app.models import Booking, Hotel

logger = logging.getLogger(__name__)


def list_hotels(db: Session) -> list[Hotel]:
    return db.query(Hotel).order_by(Hotel.id).all()


def get_hotel(db: Session, hotel_id: int) -> Hotel:
    hotel = db.get(Hotel, hotel_id)
    if hotel is None:
        raise HotelNotFound()
    return hotel


def _commit_unique_name(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateKey("name", "A hotel with this name already exists") from e


def create_hotel(db: Session, name: str, address: str, tel: str, picture: str | None = None) -> Hotel:
    hotel = Hotel(name=name.strip(), address=address, tel=tel, picture=picture)
    db.add(hotel)
    _commit_unique_name(db)
    db.refresh(hotel)
    logger.info("Hotel created: id=%s", hotel.id)
    return hotel


def update_hotel(db: Session, hotel_id: int, changes: dict) -> Hotel:
    """Apply non-None fields of changes to the hotel."""
    hotel = get_hotel(db, hotel_id)
    for field in ("name", "address", "tel", "picture"):
        value = changes.get(field)
        if value is not None:
            setattr(hotel, field, value.strip() if field == "name" else value)
    _commit_unique_name(db)
    db.refresh(hotel)
    return hotel


def delete_hotel(db: Session, hotel_id: int) -> None:
    """Delete the hotel and its bookings."""
    hotel = get_hotel(db, hotel_id)
    removed = (
        db.query(Booking)
        .filter(Booking.hotel_id == hotel_id)
        .delete(synchronize_session=False)
    )
    db.delete(hotel)
    db.commit()
    logger.info("Hotel deleted: id=%s bookings_deleted=%s", hotel_id, removed)
