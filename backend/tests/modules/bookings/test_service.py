from datetime import timedelta

import pytest

from modules.bookings.exceptions import BookingNotFoundError
from modules.bookings.models import Booking, BookingFilter
from modules.bookings.repository import InMemoryBookingRepository
from modules.bookings.service import BookingService
from shared.models import AuthenticatedUser


@pytest.fixture
def user(test_user_id, test_user_email):
    return AuthenticatedUser(id=test_user_id, email=test_user_email)


@pytest.fixture
def bookings(clock, test_user_id):
    repo = InMemoryBookingRepository()
    now = clock()
    repo.add(Booking(id="b-past-old", user_id=test_user_id, pickup_datetime=now - timedelta(days=30)))
    repo.add(Booking(id="b-past-recent", user_id=test_user_id, pickup_datetime=now - timedelta(days=1)))
    repo.add(Booking(id="b-next", user_id=test_user_id, pickup_datetime=now + timedelta(days=2)))
    # Guest booking made with the same email before the account existed
    repo.add(
        Booking(
            id="b-guest",
            booking_reference="1234a5",
            customer_email="TEST@example.com",
            customer_name="Test User",
            pickup_datetime=now + timedelta(days=10),
        )
    )
    repo.add(Booking(id="b-unscheduled", user_id=test_user_id))
    repo.add(
        Booking(
            id="b-other",
            booking_reference="9999z9",
            user_id="someone-else",
            customer_email="other@example.com",
            pickup_datetime=now + timedelta(days=1),
        )
    )
    return repo


@pytest.fixture
def service(bookings, users, clock):
    return BookingService(bookings=bookings, users=users, clock=clock)


class TestListBookings:
    @pytest.mark.asyncio
    async def test_upcoming_is_default(self, service, user):
        result = await service.list_bookings(user)
        assert result.filter == BookingFilter.UPCOMING
        assert [b.id for b in result.bookings] == ["b-next", "b-guest"]

    @pytest.mark.asyncio
    async def test_past_is_most_recent_first(self, service, user):
        result = await service.list_bookings(user, BookingFilter.PAST)
        assert [b.id for b in result.bookings] == ["b-past-recent", "b-past-old"]
        assert result.total == 2

    @pytest.mark.asyncio
    async def test_all(self, service, user):
        result = await service.list_bookings(user, BookingFilter.ALL)
        ids = [b.id for b in result.bookings]
        assert "b-unscheduled" in ids
        assert "b-other" not in ids
        assert ids[:3] == ["b-past-old", "b-past-recent", "b-next"]

    @pytest.mark.asyncio
    async def test_guest_booking_email_is_case_insensitive(self, service, user):
        result = await service.list_bookings(user)
        guest = next(b for b in result.bookings if b.id == "b-guest")
        assert guest.user_id is None


class TestGetBooking:
    @pytest.mark.asyncio
    async def test_owned(self, service, user):
        booking = await service.get_booking(user, "b-next")
        assert booking.id == "b-next"

    @pytest.mark.asyncio
    async def test_owned_by_email(self, service, user):
        booking = await service.get_booking(user, "b-guest")
        assert booking.booking_reference == "1234a5"

    @pytest.mark.asyncio
    async def test_not_owned_is_not_found(self, service, user):
        with pytest.raises(BookingNotFoundError):
            await service.get_booking(user, "b-other")

    @pytest.mark.asyncio
    async def test_unknown(self, service, user):
        with pytest.raises(BookingNotFoundError):
            await service.get_booking(user, "missing")


class TestValidateReference:
    @pytest.mark.asyncio
    async def test_known_reference_with_account(self, service):
        result = await service.validate_reference("1234a5")
        assert result.valid
        assert result.user_exists
        assert result.customer_name == "Test User"

    @pytest.mark.asyncio
    async def test_known_reference_without_account(self, service):
        result = await service.validate_reference("9999z9")
        assert result.valid
        assert not result.user_exists

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reference", ["", "1234A5", "12345", "abcd"])
    async def test_malformed(self, service, reference):
        result = await service.validate_reference(reference)
        assert not result.valid
        assert "1234a5" in result.error

    @pytest.mark.asyncio
    async def test_unknown(self, service):
        result = await service.validate_reference("0000a0")
        assert not result.valid
        assert result.error == "No booking found with this reference"
