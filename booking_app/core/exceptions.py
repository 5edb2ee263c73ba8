"""
Booking engine exceptions.
Raised in the services layer and mapped to HTTP responses in the api layer.
"""


class BookingError(Exception):
    """Base exception for all booking engine errors."""
    pass


class ParseError(BookingError, ValueError):
    """Raised when a date or time string does not match the expected format."""
    pass


class SchemaError(BookingError):
    """Raised when the stored document is not a valid list of bookings."""
    pass


class PersistenceError(BookingError):
    """Raised when the booking document could not be written."""
    pass


class BookingConflictError(BookingError):
    """Raised when the requested slot is too close to an existing booking on the same date."""

    def __init__(self, booking_date: str, booking_time: str, conflicts=None):
        self.booking_date = booking_date
        self.booking_time = booking_time
        self.conflicts = list(conflicts or [])
        super().__init__(f"Time {booking_time} on {booking_date} is already booked")
