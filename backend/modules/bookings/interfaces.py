"""
Bookings module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import Booking, BookingFilter, BookingListResponse, ReferenceValidation


@runtime_checkable
class IBookingRepository(Protocol):
    def list_for_customer(self, user_id: str, email: str) -> list[Booking]:
        """Bookings linked by user_id or made with the email, ordered by pickup time."""
        ...

    def get_by_id(self, booking_id: str) -> Optional[Booking]:
        ...

    def get_by_reference(self, reference: str) -> Optional[Booking]:
        ...


@runtime_checkable
class IBookingService(Protocol):
    async def list_bookings(
        self,
        user: AuthenticatedUser,
        booking_filter: BookingFilter = BookingFilter.UPCOMING,
    ) -> BookingListResponse:
        ...

    async def get_booking(self, user: AuthenticatedUser, booking_id: str) -> Booking:
        """
        Raises:
            BookingNotFoundError: Unknown booking or not owned by the user
        """
        ...

    async def validate_reference(self, reference: str) -> ReferenceValidation:
        ...
