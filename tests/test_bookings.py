"""Tests for app.services.bookings: lifecycle, ownership gate, listing filter and expiry sweep."""

import unittest
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from app.core.errors import AuthorizationError, BookingNotFound, HotelNotFound, ValidationError
from app.models import Booking, User
from app.services import bookings
from db_helpers import add_booking, add_hotel, add_user, make_session, make_settings, principal

TODAY = date.today()


class BookingTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.settings = make_settings()
        self.hotel = add_hotel(self.db, "H1")
        self.bob = principal(add_user(self.db, "bob@example.com"))
        self.carol = principal(add_user(self.db, "carol@example.com"))
        self.admin = principal(add_user(self.db, "admin@example.com", role="admin"))

    def tearDown(self) -> None:
        self.db.close()


class TestCreateBooking(BookingTestCase):
    def test_today_plus_two_is_two_nights(self) -> None:
        booking = bookings.create_booking(
            self.db, self.hotel.id, self.bob, TODAY, TODAY + timedelta(days=2)
        )
        self.assertEqual(booking.num_of_nights, 2)
        self.assertEqual(booking.user_id, self.bob.id)
        self.assertEqual(booking.hotel_id, self.hotel.id)

    def test_yesterday_check_in_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            bookings.create_booking(
                self.db, self.hotel.id, self.bob, TODAY - timedelta(days=1), TODAY + timedelta(days=1)
            )

    def test_four_nights_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            bookings.create_booking(
                self.db, self.hotel.id, self.bob, TODAY, TODAY + timedelta(days=4)
            )
        self.assertIn("3 nights", ctx.exception.message)
        self.assertEqual(self.db.query(Booking).count(), 0)

    def test_unknown_hotel(self) -> None:
        with self.assertRaises(HotelNotFound):
            bookings.create_booking(self.db, 999, self.bob, TODAY, TODAY + timedelta(days=1))


class TestOwnershipGate(BookingTestCase):
    """A non-owner non-admin can neither read, update nor delete; an admin can."""

    def setUp(self) -> None:
        super().setUp()
        self.booking = bookings.create_booking(
            self.db, self.hotel.id, self.carol, TODAY + timedelta(days=1), TODAY + timedelta(days=2)
        )

    def test_non_owner_is_forbidden(self) -> None:
        with self.assertRaises(AuthorizationError):
            bookings.get_booking(self.db, self.booking.id, self.bob)
        with self.assertRaises(AuthorizationError):
            bookings.update_booking(self.db, self.booking.id, self.bob, check_out=TODAY + timedelta(days=3))
        with self.assertRaises(AuthorizationError):
            bookings.delete_booking(self.db, self.booking.id, self.bob)
        self.assertEqual(self.db.query(Booking).count(), 1)

    def test_owner_and_admin_are_allowed(self) -> None:
        self.assertEqual(bookings.get_booking(self.db, self.booking.id, self.carol).id, self.booking.id)
        self.assertEqual(bookings.get_booking(self.db, self.booking.id, self.admin).id, self.booking.id)
        updated = bookings.update_booking(
            self.db, self.booking.id, self.admin, check_out=TODAY + timedelta(days=3)
        )
        self.assertEqual(updated.num_of_nights, 2)
        bookings.delete_booking(self.db, self.booking.id, self.admin)
        self.assertEqual(self.db.query(Booking).count(), 0)

    def test_missing_booking(self) -> None:
        for op in (
            lambda: bookings.get_booking(self.db, 999, self.admin),
            lambda: bookings.update_booking(self.db, 999, self.admin),
            lambda: bookings.delete_booking(self.db, 999, self.admin),
        ):
            with self.assertRaises(BookingNotFound):
                op()


class TestUpdateBooking(BookingTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking = bookings.create_booking(
            self.db, self.hotel.id, self.bob, TODAY + timedelta(days=1), TODAY + timedelta(days=3)
        )

    def test_partial_update_validates_resulting_pair(self) -> None:
        # Moving only check-out out to day 6 gives a 5-night stay.
        with self.assertRaises(ValidationError):
            bookings.update_booking(self.db, self.booking.id, self.bob, check_out=TODAY + timedelta(days=6))
        # Moving only check-in past the stored check-out breaks ordering.
        with self.assertRaises(ValidationError):
            bookings.update_booking(self.db, self.booking.id, self.bob, check_in=TODAY + timedelta(days=3))
        self.db.refresh(self.booking)
        self.assertEqual(self.booking.check_out, TODAY + timedelta(days=3))

    def test_update_recomputes_nights(self) -> None:
        updated = bookings.update_booking(
            self.db, self.booking.id, self.bob, check_in=TODAY + timedelta(days=2)
        )
        self.assertEqual(updated.num_of_nights, 1)
        self.assertEqual(updated.user_id, self.bob.id)

    def test_update_into_past_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            bookings.update_booking(
                self.db, self.booking.id, self.bob, check_in=TODAY - timedelta(days=1)
            )


class TestListBookings(BookingTestCase):
    def setUp(self) -> None:
        super().setUp()
        other = add_hotel(self.db, "H2")
        for actor, hotel in ((self.bob, self.hotel), (self.carol, self.hotel), (self.carol, other)):
            bookings.create_booking(self.db, hotel.id, actor, TODAY, TODAY + timedelta(days=1))
        self.other = other

    def test_non_admin_sees_only_own(self) -> None:
        items = bookings.list_bookings(self.db, self.bob)
        self.assertEqual([b.user_id for b in items], [self.bob.id])

    def test_admin_sees_all(self) -> None:
        self.assertEqual(len(bookings.list_bookings(self.db, self.admin)), 3)

    def test_hotel_filter(self) -> None:
        self.assertEqual(len(bookings.list_bookings(self.db, self.carol, hotel_id=self.other.id)), 1)
        self.assertEqual(len(bookings.list_bookings(self.db, self.admin, hotel_id=self.hotel.id)), 2)
        with self.assertRaises(HotelNotFound):
            bookings.list_bookings(self.db, self.admin, hotel_id=999)


class TestSweepExpired(BookingTestCase):
    def test_deletes_only_bookings_checked_out_before_today(self) -> None:
        bob = self.db.get(User, self.bob.id)
        add_booking(self.db, bob, self.hotel, TODAY - timedelta(days=3), TODAY - timedelta(days=1))
        add_booking(self.db, bob, self.hotel, TODAY - timedelta(days=2), TODAY)
        add_booking(self.db, bob, self.hotel, TODAY, TODAY + timedelta(days=1))

        deleted = bookings.sweep_expired(self.db, self.settings, now=datetime.combine(TODAY, datetime.min.time()))
        self.assertEqual(deleted, 1)
        self.assertEqual(self.db.query(Booking).count(), 2)
        self.assertEqual(bookings.sweep_expired(self.db, self.settings), 0)

    def test_disabled(self) -> None:
        session = MagicMock()
        self.assertEqual(bookings.sweep_expired(session, make_settings(SWEEP_ENABLED=False)), 0)
        session.query.assert_not_called()

    def test_database_failure_is_logged_not_raised(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.side_effect = OperationalError(
            "DELETE", {}, Exception("connection lost")
        )
        with self.assertLogs("app.services.bookings", level="ERROR"):
            self.assertEqual(bookings.sweep_expired(session, self.settings), 0)
        session.rollback.assert_called_once()
        with self.assertRaises(OperationalError):
            bookings.sweep_expired(session, self.settings, raise_errors=True)


if __name__ == "__main__":
    unittest.main()
