"""
Bookings module.

Read access to a customer's transfers for the bookings dashboard.
"""

from .interfaces import IBookingService
from .models import Booking, BookingFilter, BookingStatus, BookingListResponse
from .exceptions import BookingNotFoundError

__all__ = [
    "IBookingService",
    "Booking",
    "BookingFilter",
    "BookingStatus",
    "BookingListResponse",
    "BookingNotFoundError",
]
