"""Unit tests for app.services.booking_rules: night count, rule order, effective dates."""

import unittest
from datetime import date, datetime, timedelta, timezone

from app.services.booking_rules import (
    MAX_NIGHTS,
    REASON_CHECK_OUT_NOT_AFTER_CHECK_IN,
    REASON_PAST_CHECK_IN,
    REASON_TOO_MANY_NIGHTS,
    compute_nights,
    effective_dates,
    validate_stay,
)

TODAY = date(2026, 3, 10)


class TestComputeNights(unittest.TestCase):
    def test_whole_days_between_dates(self) -> None:
        self.assertEqual(compute_nights(TODAY, TODAY + timedelta(days=2)), 2)

    def test_dst_hour_is_rounded_away(self) -> None:
        check_in = datetime(2026, 3, 28, 0, 0)
        # A spring-forward night is 23 hours long.
        check_out = check_in + timedelta(days=2, hours=-1)
        self.assertEqual(compute_nights(check_in, check_out), 2)

    def test_mixed_date_and_datetime(self) -> None:
        check_out = datetime(2026, 3, 12, 14, 0, tzinfo=timezone.utc)
        self.assertEqual(compute_nights(TODAY, check_out), 2)


class TestValidateStayAccepts(unittest.TestCase):
    """Check-in today or later with 1 to 3 nights is accepted with the exact count."""

    def test_one_to_three_nights(self) -> None:
        for start_offset in (0, 1, 30):
            for nights in range(1, MAX_NIGHTS + 1):
                check_in = TODAY + timedelta(days=start_offset)
                result = validate_stay(check_in, check_in + timedelta(days=nights), TODAY)
                self.assertTrue(result.ok, (start_offset, nights))
                self.assertEqual(result.nights, nights)
                self.assertIsNone(result.reason)

    def test_today_given_as_datetime_late_in_day(self) -> None:
        now = datetime(2026, 3, 10, 23, 59)
        result = validate_stay(TODAY, TODAY + timedelta(days=1), now)
        self.assertTrue(result.ok)


class TestValidateStayRejects(unittest.TestCase):
    def test_check_out_on_or_before_check_in(self) -> None:
        for delta in (0, -1, -5):
            result = validate_stay(TODAY, TODAY + timedelta(days=delta), TODAY)
            self.assertFalse(result.ok)
            self.assertEqual(result.reason, REASON_CHECK_OUT_NOT_AFTER_CHECK_IN)

    def test_past_check_in(self) -> None:
        yesterday = TODAY - timedelta(days=1)
        result = validate_stay(yesterday, TODAY + timedelta(days=1), TODAY)
        self.assertFalse(result.ok)
        self.assertEqual(result.reason, REASON_PAST_CHECK_IN)

    def test_past_check_in_wins_over_bad_ordering(self) -> None:
        yesterday = TODAY - timedelta(days=1)
        result = validate_stay(yesterday, yesterday - timedelta(days=1), TODAY)
        self.assertEqual(result.reason, REASON_PAST_CHECK_IN)

    def test_more_than_three_nights(self) -> None:
        for nights in (4, 5, 14):
            result = validate_stay(TODAY, TODAY + timedelta(days=nights), TODAY)
            self.assertFalse(result.ok)
            self.assertEqual(result.reason, REASON_TOO_MANY_NIGHTS)
            self.assertEqual(result.nights, nights)

    def test_less_than_one_night_with_datetimes(self) -> None:
        check_in = datetime(2026, 3, 11, 14, 0)
        result = validate_stay(check_in, check_in + timedelta(hours=6), TODAY)
        self.assertFalse(result.ok)
        self.assertEqual(result.nights, 0)


class TestEffectiveDates(unittest.TestCase):
    def test_none_keeps_stored_values(self) -> None:
        stored_in, stored_out = TODAY, TODAY + timedelta(days=2)
        self.assertEqual(effective_dates(stored_in, stored_out, None, None), (stored_in, stored_out))

    def test_partial_patch_overlays_one_side(self) -> None:
        stored_in, stored_out = TODAY, TODAY + timedelta(days=2)
        new_out = TODAY + timedelta(days=6)
        check_in, check_out = effective_dates(stored_in, stored_out, None, new_out)
        self.assertEqual((check_in, check_out), (stored_in, new_out))
        # Overlaid pair is what gets validated: extending check-out alone breaks the cap.
        self.assertFalse(validate_stay(check_in, check_out, TODAY).ok)


if __name__ == "__main__":
    unittest.main()
