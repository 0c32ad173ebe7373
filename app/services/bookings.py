"""
Booking lifecycle: create, read, list, update, delete and the expiry sweep.

Each mutation is one read-validate-write against the session with no row lock;
two concurrent updates of the same booking are last-write-wins.
"""

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.core.errors import BookingNotFound, Forbidden, HotelNotFound, ValidationError
from app.models import Booking, Hotel
from app.models.user import ROLE_ADMIN
from app.schemas.auth import CurrentUser
from app.services.booking_rules import effective_dates, validate_stay

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def _can_access(booking: Booking, actor: CurrentUser) -> bool:
    return actor.role == ROLE_ADMIN or booking.user_id == actor.id


def _visible_bookings(db: Session, actor: CurrentUser) -> Query:
    """Bookings the actor may see; non-admins are filtered in SQL, never after the fetch."""
    query = db.query(Booking)
    if actor.role != ROLE_ADMIN:
        query = query.filter(Booking.user_id == actor.id)
    return query


def _check_dates(check_in: date, check_out: date, today: date) -> int:
    result = validate_stay(check_in, check_out, today)
    if not result.ok:
        raise ValidationError(result.reason)
    return int(result.nights)


def create_booking(
    db: Session,
    hotel_id: int,
    actor: CurrentUser,
    check_in: date,
    check_out: date,
    today: date | None = None,
) -> Booking:
    """Validate and persist a booking owned by actor. Raises HotelNotFound or ValidationError."""
    if db.get(Hotel, hotel_id) is None:
        raise HotelNotFound()
    nights = _check_dates(check_in, check_out, today or date.today())
    booking = Booking(
        user_id=actor.id,
        hotel_id=hotel_id,
        check_in=check_in,
        check_out=check_out,
        num_of_nights=nights,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info(
        "Booking created: id=%s user_id=%s hotel_id=%s nights=%s",
        booking.id,
        actor.id,
        hotel_id,
        nights,
    )
    return booking


def get_booking(db: Session, booking_id: int, actor: CurrentUser) -> Booking:
    """Return the booking if it exists and actor owns it or is admin."""
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise BookingNotFound()
    if not _can_access(booking, actor):
        logger.warning(
            "User id=%s denied access to booking id=%s", actor.id, booking_id
        )
        raise Forbidden("Not authorized to access this booking")
    return booking


def list_bookings(
    db: Session,
    actor: CurrentUser,
    hotel_id: int | None = None,
) -> list[Booking]:
    """All bookings for admins, own bookings otherwise; optionally limited to one hotel."""
    query = _visible_bookings(db, actor)
    if hotel_id is not None:
        if db.get(Hotel, hotel_id) is None:
            raise HotelNotFound()
        query = query.filter(Booking.hotel_id == hotel_id)
    return query.order_by(Booking.check_in, Booking.id).all()


def update_booking(
    db: Session,
    booking_id: int,
    actor: CurrentUser,
    check_in: date | None = None,
    check_out: date | None = None,
    today: date | None = None,
) -> Booking:
    """
    Re-validate the booking's dates with the patch applied and persist on success.
    The whole resulting pair is checked, so changing one date cannot skip a rule.
    """
    booking = get_booking(db, booking_id, actor)
    new_check_in, new_check_out = effective_dates(
        booking.check_in, booking.check_out, check_in, check_out
    )
    nights = _check_dates(new_check_in, new_check_out, today or date.today())
    booking.check_in = new_check_in
    booking.check_out = new_check_out
    booking.num_of_nights = nights
    db.commit()
    db.refresh(booking)
    logger.info("Booking updated: id=%s by user_id=%s", booking.id, actor.id)
    return booking


def delete_booking(db: Session, booking_id: int, actor: CurrentUser) -> None:
    booking = get_booking(db, booking_id, actor)
    db.delete(booking)
    db.commit()
    logger.info("Booking deleted: id=%s by user_id=%s", booking_id, actor.id)


def sweep_expired(
    db: Session,
    settings: "Settings",
    now: datetime | None = None,
    raise_errors: bool = False,
) -> int:
    """
    Delete bookings whose check-out date is before now's date; return how many.

    Best effort: a database failure is logged and reported as 0, never raised
    unless raise_errors is set (the CLI uses it to pick its exit code).
    Readers can still see an expired booking between sweeps. Idempotent.
    """
    if not settings.SWEEP_ENABLED:
        logger.debug("Booking sweep is disabled (SWEEP_ENABLED=false); skipping.")
        return 0
    cutoff = (now or datetime.now()).date()
    try:
        deleted_count = (
            db.query(Booking)
            .filter(Booking.check_out < cutoff)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Booking sweep failed: cutoff=%s error=%s", cutoff.isoformat(), e)
        if raise_errors:
            raise
        return 0
    if deleted_count > 0:
        logger.info(
            "Booking sweep: cutoff=%s, bookings_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
