"""
Booking exceptions.
"""

from shared.exceptions import NotFoundError


class BookingNotFoundError(NotFoundError):
    """Raised for unknown bookings and for bookings the caller doesn't own."""

    def __init__(self, booking_id: str):
        super().__init__(
            "Booking not found",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )
