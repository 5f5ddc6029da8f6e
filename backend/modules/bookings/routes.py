"""
Booking API endpoints.

Listing and details require a signed-in user; reference validation is public.
"""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_booking_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IBookingService
from .models import (
    Booking,
    BookingFilter,
    BookingListResponse,
    ReferenceValidation,
    ValidateReferenceRequest,
)

router = APIRouter()


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    filter: BookingFilter = Query(default=BookingFilter.UPCOMING, description="upcoming, past or all"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IBookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """
    List the current user's bookings.

    Includes bookings made as a guest with the same email.
    """
    return await service.list_bookings(user, filter)


@router.post("/validate-reference", response_model=ReferenceValidation)
async def validate_reference(
    request: ValidateReferenceRequest,
    service: IBookingService = Depends(get_booking_service),
) -> ReferenceValidation:
    return await service.validate_reference(request.booking_reference)


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(
    booking_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IBookingService = Depends(get_booking_service),
) -> Booking:
    return await service.get_booking(user, booking_id)
