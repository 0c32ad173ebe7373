"""
Booking date rules: night count and accept/reject decision for a stay.

Pure functions, no I/O. The same check runs at creation and at update time; on
update it is given the effective dates (patch overlaid on the stored booking).
"""

from dataclasses import dataclass
from datetime import date, datetime

MIN_NIGHTS = 1
MAX_NIGHTS = 3

SECONDS_PER_DAY = 24 * 60 * 60

# Rejection reasons, in the order the rules are checked.
REASON_PAST_CHECK_IN = "You can only book for now or future."
REASON_CHECK_OUT_NOT_AFTER_CHECK_IN = "Check-out date must be after check-in date."
REASON_TOO_FEW_NIGHTS = f"Minimum booking is {MIN_NIGHTS} night."
REASON_TOO_MANY_NIGHTS = f"You can only book up to {MAX_NIGHTS} nights."


@dataclass(frozen=True)
class DateCheck:
    """Outcome of validate_stay: ok with the night count, or rejected with a reason."""

    ok: bool
    nights: int | None = None
    reason: str | None = None


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def compute_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """
    Whole days between check-in and check-out.

    Datetimes are rounded to the nearest day so a DST shift of an hour does not
    change the count.
    """
    if isinstance(check_in, datetime) != isinstance(check_out, datetime):
        check_in, check_out = _as_date(check_in), _as_date(check_out)
    delta = check_out - check_in
    return round(delta.total_seconds() / SECONDS_PER_DAY)


def validate_stay(
    check_in: date | datetime,
    check_out: date | datetime,
    today: date | datetime,
) -> DateCheck:
    """
    Decide whether a stay is bookable as of today. First failing rule wins:

    1. check-in is not before today (midnight);
    2. check-out is strictly after check-in;
    3. the night count is between MIN_NIGHTS and MAX_NIGHTS.
    """
    if isinstance(check_in, datetime) != isinstance(check_out, datetime):
        check_in, check_out = _as_date(check_in), _as_date(check_out)
    if _as_date(check_in) < _as_date(today):
        return DateCheck(ok=False, reason=REASON_PAST_CHECK_IN)
    if check_out <= check_in:
        return DateCheck(ok=False, reason=REASON_CHECK_OUT_NOT_AFTER_CHECK_IN)
    nights = compute_nights(check_in, check_out)
    if nights < MIN_NIGHTS:
        return DateCheck(ok=False, nights=nights, reason=REASON_TOO_FEW_NIGHTS)
    if nights > MAX_NIGHTS:
        return DateCheck(ok=False, nights=nights, reason=REASON_TOO_MANY_NIGHTS)
    return DateCheck(ok=True, nights=nights)


def effective_dates(
    stored_check_in: date,
    stored_check_out: date,
    new_check_in: date | None,
    new_check_out: date | None,
) -> tuple[date, date]:
    """Overlay a partial patch on the stored dates; None keeps the stored value."""
    return (
        new_check_in if new_check_in is not None else stored_check_in,
        new_check_out if new_check_out is not None else stored_check_out,
    )
