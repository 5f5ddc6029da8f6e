"""
Booking data models.

Bookings are rows of the trips table; only the fields the dashboard and
the sign-up prefill need are mapped.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingFilter(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"


class Booking(BaseModel):
    id: str
    booking_reference: Optional[str] = None
    user_id: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    pickup_datetime: Optional[datetime] = None
    vehicle_type: Optional[str] = None
    passengers: Optional[int] = None
    total_price: Optional[float] = None
    status: BookingStatus = BookingStatus.PENDING


class BookingListResponse(BaseModel):
    bookings: list[Booking]
    total: int
    filter: BookingFilter


class ValidateReferenceRequest(BaseModel):
    booking_reference: str = Field(..., max_length=32)


class ReferenceValidation(BaseModel):
    """Result of checking a booking reference from the sign-up form."""

    valid: bool
    user_exists: bool = False
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    error: Optional[str] = None
