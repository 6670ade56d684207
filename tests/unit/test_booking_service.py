"""Unit tests for booking service application layer."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from src.car_rental.application.services.booked_car_service import BookedCarService
from src.car_rental.application.services.booking_service import (
    BookingService,
    FlatRatePricing,
    PricingStrategy,
)
from src.car_rental.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.car_rental.domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.repositories.memory_repositories import InMemoryBookingRepository


def _range(checkin: str, checkout: str) -> DateRange:
    return DateRange(date.fromisoformat(checkin), date.fromisoformat(checkout))


class PerCarDayPricing(PricingStrategy):
    """Ten per car per day."""

    def quote(self, car_ids, date_range):
        return Decimal(len(car_ids) * date_range.days * 10)


class YieldingBookingRepository(InMemoryBookingRepository):
    """Suspends during the overlap check so concurrent requests interleave."""

    async def has_overlapping_booking(self, car_id, date_range, exclude_booking_id=None):
        await asyncio.sleep(0)
        return await super().has_overlapping_booking(car_id, date_range, exclude_booking_id)


@pytest.fixture
def booking_service(booking_repository, booked_car_repository, car_repository, user_repository):
    return BookingService(
        booking_repository=booking_repository,
        booked_car_repository=booked_car_repository,
        car_repository=car_repository,
        user_repository=user_repository
    )


class TestCreateBooking:
    """Test cases for booking creation."""

    async def test_create_booking_success(self, booking_service, store, alice):
        """Test that a booking and one association per car are stored."""
        booking = await booking_service.create_booking(
            alice, alice.user_id, [10, 12], _range("2024-06-01", "2024-06-05")
        )

        assert booking.id is not None
        assert booking.user_id == alice.user_id
        assert booking.price == Decimal("150.00")
        assert sorted(bc.car_id for bc in store.booked_cars.values()) == [10, 12]
        assert all(bc.booking_id == booking.id for bc in store.booked_cars.values())

    async def test_duplicate_car_ids_are_collapsed(self, booking_service, store, alice):
        """Test that repeating a car in the request books it once."""
        await booking_service.create_booking(alice, alice.user_id, [10, 10], _range("2024-06-01", "2024-06-05"))

        assert [bc.car_id for bc in store.booked_cars.values()] == [10]

    async def test_empty_car_list_rejected(self, booking_service, alice):
        """Test that at least one car is required."""
        with pytest.raises(ValidationError, match="At least one car"):
            await booking_service.create_booking(alice, alice.user_id, [], _range("2024-06-01", "2024-06-05"))

    async def test_conflict_reports_unavailable_cars_and_stores_nothing(self, booking_service, store,
                                                                        alice, bob):
        """Test the partial conflict case: only car 11 is taken, nothing is written."""
        await booking_service.create_booking(bob, bob.user_id, [11], _range("2024-06-01", "2024-06-05"))
        bookings_before = dict(store.bookings)
        links_before = dict(store.booked_cars)

        with pytest.raises(ConflictError) as exc_info:
            await booking_service.create_booking(
                alice, alice.user_id, [10, 11], _range("2024-06-03", "2024-06-10")
            )

        assert exc_info.value.unavailable_car_ids == [11]
        assert store.bookings.keys() == bookings_before.keys()
        assert store.booked_cars.keys() == links_before.keys()

    async def test_sequential_overlapping_creates_second_rejected(self, booking_service, alice, bob):
        """Test that the same car cannot be booked twice for overlapping dates."""
        await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-06-01", "2024-06-05"))

        with pytest.raises(ConflictError):
            await booking_service.create_booking(bob, bob.user_id, [10], _range("2024-06-04", "2024-06-08"))

    async def test_back_to_back_booking_rejected(self, booking_service, alice, bob):
        """Test that checkout day and next checkin day may not coincide."""
        await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-07-01", "2024-07-05"))

        with pytest.raises(ConflictError) as exc_info:
            await booking_service.create_booking(bob, bob.user_id, [10], _range("2024-07-05", "2024-07-10"))

        assert exc_info.value.unavailable_car_ids == [10]

    async def test_adjacent_free_day_allowed(self, booking_service, alice, bob):
        """Test that a one-day gap between bookings is accepted."""
        await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-07-01", "2024-07-05"))
        booking = await booking_service.create_booking(bob, bob.user_id, [10], _range("2024-07-06", "2024-07-10"))

        assert booking.id is not None

    async def test_user_cannot_book_for_someone_else(self, booking_service, alice, bob):
        """Test that a non-admin may only create bookings for themselves."""
        with pytest.raises(AuthorizationError):
            await booking_service.create_booking(alice, bob.user_id, [10], _range("2024-06-01", "2024-06-05"))

    async def test_admin_can_book_for_any_user(self, booking_service, admin, bob):
        """Test that admins may create bookings on behalf of users."""
        booking = await booking_service.create_booking(admin, bob.user_id, [10], _range("2024-06-01", "2024-06-05"))

        assert booking.user_id == bob.user_id

    async def test_unknown_car_rejected(self, booking_service, alice):
        """Test that every car must exist."""
        with pytest.raises(NotFoundError, match="Car not found: 99"):
            await booking_service.create_booking(alice, alice.user_id, [10, 99], _range("2024-06-01", "2024-06-05"))

    async def test_unknown_user_rejected(self, booking_service, admin):
        """Test that the booking owner must exist."""
        with pytest.raises(NotFoundError, match="User not found"):
            await booking_service.create_booking(admin, 999, [10], _range("2024-06-01", "2024-06-05"))

    async def test_pricing_strategy_is_used(self, booking_repository, booked_car_repository,
                                            car_repository, user_repository, alice):
        """Test that the injected pricing strategy sets the price."""
        service = BookingService(booking_repository, booked_car_repository, car_repository,
                                 user_repository, pricing=PerCarDayPricing())

        booking = await service.create_booking(alice, alice.user_id, [10, 11], _range("2024-06-01", "2024-06-04"))

        assert booking.price == Decimal("60")

    async def test_concurrent_creates_exactly_one_succeeds(self, store, booked_car_repository,
                                                           car_repository, user_repository, alice, bob):
        """Test that two simultaneous requests for the same car cannot both win."""
        def make_service():
            return BookingService(
                YieldingBookingRepository(store),
                booked_car_repository,
                car_repository,
                user_repository
            )

        date_range = _range("2024-08-01", "2024-08-05")
        results = await asyncio.gather(
            make_service().create_booking(alice, alice.user_id, [10], date_range),
            make_service().create_booking(bob, bob.user_id, [10], date_range),
            return_exceptions=True
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        assert len(conflicts) == 1
        assert len(store.bookings) == 1
        assert len(store.booked_cars) == 1

    async def test_concurrent_reschedule_and_car_link_cannot_double_book(
        self, store, booked_car_repository, car_repository, user_repository, admin, alice, bob
    ):
        """Test that moving a booking while a car is linked to it keeps the car single-booked."""
        booking_repository = YieldingBookingRepository(store)
        service = BookingService(booking_repository, booked_car_repository, car_repository, user_repository)
        links = BookedCarService(booked_car_repository, booking_repository, car_repository)

        mine = await service.create_booking(alice, alice.user_id, [10], _range("2024-06-01", "2024-06-05"))
        await service.create_booking(bob, bob.user_id, [11], _range("2024-06-10", "2024-06-15"))

        results = await asyncio.gather(
            service.update_booking(alice, mine.id, _range("2024-06-10", "2024-06-12")),
            links.create(admin, mine.id, 11),
            return_exceptions=True
        )

        assert len([r for r in results if isinstance(r, ConflictError)]) == 1
        holders = [store.bookings[bc.booking_id] for bc in store.booked_cars.values() if bc.car_id == 11]
        for i, first in enumerate(holders):
            for second in holders[i + 1:]:
                assert not first.overlaps(second.date_range)


class TestUpdateBooking:
    """Test cases for rescheduling bookings."""

    @pytest.fixture
    async def alice_booking(self, booking_service, alice):
        return await booking_service.create_booking(
            alice, alice.user_id, [10], _range("2024-06-01", "2024-06-05")
        )

    async def test_owner_can_reschedule(self, booking_service, alice, alice_booking):
        """Test moving a booking to new dates."""
        updated = await booking_service.update_booking(
            alice, alice_booking.id, _range("2024-06-10", "2024-06-12")
        )

        assert updated.checkin_date == date(2024, 6, 10)
        stored = await booking_service.get_booking(alice, alice_booking.id)
        assert stored.checkout_date == date(2024, 6, 12)

    async def test_reschedule_overlapping_itself_allowed(self, booking_service, alice, alice_booking):
        """Test that a booking does not conflict with its own old dates."""
        updated = await booking_service.update_booking(
            alice, alice_booking.id, _range("2024-06-03", "2024-06-07")
        )

        assert updated.checkout_date == date(2024, 6, 7)

    async def test_reschedule_into_other_booking_rejected(self, booking_service, alice, bob, alice_booking):
        """Test that the new dates are checked against other bookings."""
        await booking_service.create_booking(bob, bob.user_id, [10], _range("2024-06-10", "2024-06-15"))

        with pytest.raises(ConflictError) as exc_info:
            await booking_service.update_booking(alice, alice_booking.id, _range("2024-06-04", "2024-06-11"))

        assert exc_info.value.unavailable_car_ids == [10]

    async def test_non_owner_cannot_update(self, booking_service, bob, alice_booking):
        """Test that another user's booking cannot be modified."""
        with pytest.raises(AuthorizationError):
            await booking_service.update_booking(bob, alice_booking.id, _range("2024-06-10", "2024-06-12"))

    async def test_owner_cannot_hand_booking_to_another_user(self, booking_service, alice, bob, alice_booking):
        """Test that reassigning ownership requires rights over the new owner."""
        with pytest.raises(AuthorizationError):
            await booking_service.update_booking(
                alice, alice_booking.id, _range("2024-06-01", "2024-06-05"), user_id=bob.user_id
            )

    async def test_admin_can_reassign_and_reprice(self, booking_service, admin, bob, alice_booking):
        """Test that admins may change owner and price."""
        updated = await booking_service.update_booking(
            admin, alice_booking.id, _range("2024-06-01", "2024-06-05"),
            user_id=bob.user_id, price=Decimal("99.90")
        )

        assert updated.user_id == bob.user_id
        assert updated.price == Decimal("99.90")

    async def test_update_missing_booking(self, booking_service, admin):
        """Test updating an unknown booking."""
        with pytest.raises(NotFoundError, match="Booking not found: 404"):
            await booking_service.update_booking(admin, 404, _range("2024-06-01", "2024-06-05"))


class TestBookingQueries:
    """Test cases for reading and deleting bookings."""

    async def test_get_user_bookings_most_recent_first(self, booking_service, alice):
        """Test listing a user's bookings."""
        await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-06-01", "2024-06-05"))
        await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-09-01", "2024-09-05"))

        bookings = await booking_service.get_user_bookings(alice, alice.user_id)

        assert [b.checkin_date.month for b in bookings] == [9, 6]

    async def test_get_user_bookings_of_other_user_denied(self, booking_service, alice, bob):
        """Test that users only see their own bookings."""
        with pytest.raises(AuthorizationError):
            await booking_service.get_user_bookings(alice, bob.user_id)

    async def test_get_user_bookings_unknown_user(self, booking_service, admin):
        """Test listing bookings of a user that does not exist."""
        with pytest.raises(NotFoundError):
            await booking_service.get_user_bookings(admin, 999)

    async def test_list_bookings_admin_only(self, booking_service, admin, alice):
        """Test that the full booking list is restricted to admins."""
        await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-06-01", "2024-06-05"))

        assert len(await booking_service.list_bookings(admin)) == 1
        with pytest.raises(AuthorizationError):
            await booking_service.list_bookings(alice)

    async def test_get_booking_cars(self, booking_service, alice):
        """Test listing the cars reserved under a booking."""
        booking = await booking_service.create_booking(
            alice, alice.user_id, [12, 10], _range("2024-06-01", "2024-06-05")
        )

        cars = await booking_service.get_booking_cars(alice, booking.id)

        assert sorted(car.id for car in cars) == [10, 12]

    async def test_delete_booking_frees_cars(self, booking_service, store, alice, bob):
        """Test that deleting a booking removes its associations."""
        booking = await booking_service.create_booking(alice, alice.user_id, [10], _range("2024-06-01", "2024-06-05"))

        with pytest.raises(AuthorizationError):
            await booking_service.delete_booking(bob, booking.id)

        await booking_service.delete_booking(alice, booking.id)

        assert store.bookings == {}
        assert store.booked_cars == {}
        rebooked = await booking_service.create_booking(bob, bob.user_id, [10], _range("2024-06-01", "2024-06-05"))
        assert rebooked.id is not None


class TestFlatRatePricing:
    """Test cases for the default pricing strategy."""

    def test_default_amount(self):
        """Test the flat default price."""
        assert FlatRatePricing().quote([1, 2, 3], _range("2024-06-01", "2024-06-30")) == Decimal("150.00")

    def test_custom_amount(self):
        """Test a configured flat price."""
        assert FlatRatePricing(Decimal("200")).quote([1], _range("2024-06-01", "2024-06-02")) == Decimal("200")
