"""Time slot conflict detection between a candidate booking and stored bookings."""

from datetime import datetime, time
from typing import List, Sequence

from booking_app.core.exceptions import ParseError
from booking_app.core.logger import logger
from booking_app.models.booking import Booking

TIME_FORMAT = "%H:%M"
DEFAULT_MIN_SEPARATION = 45


def parse_time(value: str) -> time:
    """
    Parse a 24-hour HH:MM string.
    Raises ParseError if the value is not a valid time of day.
    """
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid time '{value}': expected HH:MM") from e


def minutes_apart(a: time, b: time) -> int:
    # Same-day arithmetic, 23:50 and 00:10 are 1420 minutes apart
    return abs((a.hour * 60 + a.minute) - (b.hour * 60 + b.minute))


def find_conflicts(
    candidate_date: str,
    candidate_time: str,
    existing: Sequence[Booking],
    min_separation: int = DEFAULT_MIN_SEPARATION,
) -> List[Booking]:
    """
    Return the stored bookings on the same date whose time is less than
    `min_separation` minutes away from the candidate.

    Dates are compared as plain strings. A candidate time that cannot be
    parsed is never conflicting; stored bookings with an unparseable time
    are skipped.
    """
    try:
        wanted = parse_time(candidate_time)
    except ParseError:
        logger.warning(f"⚠️ Unparseable booking time '{candidate_time}', accepting without conflict check")
        return []

    conflicts = []
    for booking in existing:
        if booking.booking_date != candidate_date:
            continue
        try:
            booked = parse_time(booking.booking_time)
        except ParseError:
            logger.debug(f"Skipping stored booking {booking.id} with bad time '{booking.booking_time}'")
            continue
        if minutes_apart(wanted, booked) < min_separation:
            conflicts.append(booking)
    return conflicts


def is_conflicting(
    candidate_date: str,
    candidate_time: str,
    existing: Sequence[Booking],
    min_separation: int = DEFAULT_MIN_SEPARATION,
) -> bool:
    return bool(find_conflicts(candidate_date, candidate_time, existing, min_separation))
