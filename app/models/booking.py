"""ORM model for room reservations."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    func,
)

from app.models.base import Base


class Booking(Base):
    """
    Date-bounded reservation of a hotel by one user.

    user_id and hotel_id are fixed at creation. num_of_nights is derived from
    check_in/check_out by the booking rules and is never taken from the client.
    A hotel's bookings are found by filtering on hotel_id; there is no back-reference.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_checkout_after_checkin"),
        CheckConstraint(
            "num_of_nights BETWEEN 1 AND 3", name="ck_bookings_num_of_nights"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hotel_id = Column(
        Integer,
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False, index=True)
    num_of_nights = Column(Integer, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
