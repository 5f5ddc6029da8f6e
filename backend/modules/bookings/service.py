"""
Bookings service.

Serves the bookings dashboard and the booking-reference check used by the
post-booking sign-up form.
"""

import logging
from typing import Optional

from shared.clock import Clock, utc_now
from shared.models import AuthenticatedUser
from shared.validators import is_valid_booking_reference, normalize_email
from modules.auth.interfaces import IUserRepository

from .exceptions import BookingNotFoundError
from .interfaces import IBookingRepository, IBookingService
from .models import Booking, BookingFilter, BookingListResponse, ReferenceValidation

logger = logging.getLogger(__name__)


class BookingService(IBookingService):
    def __init__(
        self,
        bookings: IBookingRepository,
        users: IUserRepository,
        clock: Clock = utc_now,
    ):
        self._bookings = bookings
        self._users = users
        self._clock = clock

    def _owns(self, user: AuthenticatedUser, booking: Booking) -> bool:
        if booking.user_id and booking.user_id == user.id:
            return True
        email = normalize_email(str(user.email))
        return bool(email) and normalize_email(booking.customer_email) == email

    async def list_bookings(
        self,
        user: AuthenticatedUser,
        booking_filter: BookingFilter = BookingFilter.UPCOMING,
    ) -> BookingListResponse:
        bookings = self._bookings.list_for_customer(user.id, normalize_email(str(user.email)))
        now = self._clock()

        if booking_filter == BookingFilter.UPCOMING:
            bookings = [b for b in bookings if b.pickup_datetime and b.pickup_datetime >= now]
        elif booking_filter == BookingFilter.PAST:
            # Most recent first
            bookings = [b for b in bookings if b.pickup_datetime and b.pickup_datetime < now]
            bookings.reverse()

        return BookingListResponse(bookings=bookings, total=len(bookings), filter=booking_filter)

    async def get_booking(self, user: AuthenticatedUser, booking_id: str) -> Booking:
        booking = self._bookings.get_by_id(booking_id)
        if booking is None or not self._owns(user, booking):
            raise BookingNotFoundError(booking_id)
        return booking

    async def validate_reference(self, reference: Optional[str]) -> ReferenceValidation:
        reference = (reference or "").strip()
        if not is_valid_booking_reference(reference):
            return ReferenceValidation(
                valid=False,
                error="Booking reference must look like 1234a5",
            )

        booking = self._bookings.get_by_reference(reference)
        if booking is None:
            return ReferenceValidation(valid=False, error="No booking found with this reference")

        user_exists = bool(
            booking.customer_email and self._users.get_by_email(booking.customer_email)
        )
        return ReferenceValidation(
            valid=True,
            user_exists=user_exists,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
        )
