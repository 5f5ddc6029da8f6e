"""
Booking repository over the trips table.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from shared.clock import parse_timestamp
from shared.repository import BaseRepository
from shared.validators import normalize_email

from .models import Booking, BookingStatus

TABLE = "trips"
_NO_PICKUP = datetime.max.replace(tzinfo=timezone.utc)


def _map_to_booking(row: dict[str, Any]) -> Booking:
    pickup = row.get("datetime")
    price = row.get("estimated_price")
    return Booking(
        id=str(row["id"]),
        booking_reference=row.get("booking_reference"),
        user_id=str(row["user_id"]) if row.get("user_id") else None,
        customer_email=row.get("customer_email"),
        customer_name=row.get("customer_name"),
        pickup_location=row.get("pickup_address"),
        dropoff_location=row.get("dropoff_address"),
        pickup_datetime=parse_timestamp(pickup) if pickup else None,
        vehicle_type=row.get("vehicle_type"),
        passengers=row.get("passengers"),
        total_price=float(price) if price is not None else None,
        status=BookingStatus(row.get("status") or BookingStatus.PENDING.value),
    )


class BookingRepository(BaseRepository[Booking]):
    """
    Trips accessed with the service role.

    Note: ownership is enforced by BookingService, not here.
    """

    def list_for_customer(self, user_id: str, email: str) -> list[Booking]:
        query = self._db.table(TABLE).select("*")
        if email:
            query = query.or_(f"user_id.eq.{user_id},customer_email.ilike.{email}")
        else:
            query = query.eq("user_id", user_id)
        result = query.order("datetime").execute()
        return [_map_to_booking(row) for row in result.data or []]

    def get_by_id(self, booking_id: str) -> Optional[Booking]:
        result = self._db.table(TABLE).select("*").eq("id", booking_id).limit(1).execute()
        row = self._first(result)
        return _map_to_booking(row) if row else None

    def get_by_reference(self, reference: str) -> Optional[Booking]:
        result = (
            self._db.table(TABLE)
            .select("*")
            .eq("booking_reference", reference)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return _map_to_booking(row) if row else None


class InMemoryBookingRepository:
    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}

    def add(self, booking: Booking) -> Booking:
        self._bookings[booking.id] = booking
        return booking

    def list_for_customer(self, user_id: str, email: str) -> list[Booking]:
        matches = [
            b for b in self._bookings.values()
            if b.user_id == user_id or (email and normalize_email(b.customer_email) == email)
        ]
        return sorted(matches, key=lambda b: b.pickup_datetime or _NO_PICKUP)

    def get_by_id(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def get_by_reference(self, reference: str) -> Optional[Booking]:
        for booking in self._bookings.values():
            if booking.booking_reference == reference:
                return booking
        return None
