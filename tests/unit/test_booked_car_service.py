"""Unit tests for administrative booking/car association management."""

import pytest
from datetime import date
from decimal import Decimal

from src.car_rental.application.services.booked_car_service import BookedCarService
from src.car_rental.domain.entities.booking import BookedCar, Booking
from src.car_rental.domain.exceptions import AuthorizationError, ConflictError, NotFoundError
from src.car_rental.domain.value_objects.date_range import DateRange


@pytest.fixture
def booked_car_service(booked_car_repository, booking_repository, car_repository):
    return BookedCarService(booked_car_repository, booking_repository, car_repository)


@pytest.fixture
async def bookings(booking_repository, booked_car_repository):
    """Two overlapping bookings: June 1-5 with car 10, June 3-8 with car 11."""
    first = await booking_repository.save(
        Booking(2, DateRange(date(2024, 6, 1), date(2024, 6, 5)), Decimal("150"))
    )
    second = await booking_repository.save(
        Booking(3, DateRange(date(2024, 6, 3), date(2024, 6, 8)), Decimal("150"))
    )
    await booked_car_repository.save(BookedCar(first.id, 10))
    await booked_car_repository.save(BookedCar(second.id, 11))
    return first, second


class TestBookedCarService:
    """Test cases for BookedCarService."""

    async def test_admin_links_free_car(self, booked_car_service, admin, bookings):
        """Test attaching a car that is free for the booking's range."""
        first, _ = bookings
        link = await booked_car_service.create(admin, first.id, 12)

        assert link.id is not None
        assert (link.booking_id, link.car_id) == (first.id, 12)

    async def test_linking_busy_car_conflicts(self, booked_car_service, admin, bookings):
        """Test that manual links cannot double-book a car."""
        first, _ = bookings

        with pytest.raises(ConflictError) as exc_info:
            await booked_car_service.create(admin, first.id, 11)

        assert exc_info.value.unavailable_car_ids == [11]

    async def test_non_admin_denied(self, booked_car_service, alice, bookings):
        """Test that association management is admin-only."""
        with pytest.raises(AuthorizationError):
            await booked_car_service.list_all(alice)

    async def test_missing_booking_or_car(self, booked_car_service, admin, bookings):
        """Test that both ends of the link must exist."""
        first, _ = bookings

        with pytest.raises(NotFoundError, match="Booking"):
            await booked_car_service.create(admin, 999, 12)
        with pytest.raises(NotFoundError, match="Car"):
            await booked_car_service.create(admin, first.id, 999)

    async def test_update_same_link_is_allowed(self, booked_car_service, admin, bookings):
        """Test that re-saving an unchanged link does not conflict with itself."""
        links = await booked_car_service.list_all(admin)
        link = links[0]

        updated = await booked_car_service.update(admin, link.id, link.booking_id, link.car_id)

        assert updated.car_id == link.car_id

    async def test_update_to_busy_car_conflicts(self, booked_car_service, admin, bookings):
        """Test moving a link onto a car taken for the range."""
        first, _ = bookings
        link = (await booked_car_service.list_all(admin))[0]

        with pytest.raises(ConflictError):
            await booked_car_service.update(admin, link.id, first.id, 11)

    async def test_move_car_between_overlapping_bookings(self, booked_car_service, booked_car_repository,
                                                         store, admin, bookings):
        """Test that a car's old booking does not block moving it to an overlapping one."""
        first, second = bookings
        link = next(bc for bc in await booked_car_repository.find_by_booking_id(first.id) if bc.car_id == 10)

        moved = await booked_car_service.update(admin, link.id, second.id, 10)

        assert (moved.booking_id, moved.car_id) == (second.id, 10)
        assert store.booked_cars[link.id].booking_id == second.id

    async def test_move_car_onto_taken_range_conflicts(self, booked_car_service, booked_car_repository,
                                                       booking_repository, admin, bookings):
        """Test that the car is still checked against bookings other than its old one."""
        first, second = bookings
        third = await booking_repository.save(
            Booking(2, DateRange(date(2024, 6, 6), date(2024, 6, 9)), Decimal("150"))
        )
        await booked_car_repository.save(BookedCar(third.id, 10))
        link = next(bc for bc in await booked_car_repository.find_by_booking_id(first.id) if bc.car_id == 10)

        with pytest.raises(ConflictError) as exc_info:
            await booked_car_service.update(admin, link.id, second.id, 10)

        assert exc_info.value.unavailable_car_ids == [10]

    async def test_delete(self, booked_car_service, store, admin, bookings):
        """Test removing a link, then removing it again."""
        link = (await booked_car_service.list_all(admin))[0]

        await booked_car_service.delete(admin, link.id)

        assert link.id not in store.booked_cars
        with pytest.raises(NotFoundError):
            await booked_car_service.get(admin, link.id)
        with pytest.raises(NotFoundError):
            await booked_car_service.delete(admin, link.id)
