"""Unit tests for car catalog management."""

import pytest
from datetime import date
from decimal import Decimal

from src.car_rental.application.services.car_service import CarService
from src.car_rental.domain.entities.booking import BookedCar, Booking
from src.car_rental.domain.entities.car import EngineType
from src.car_rental.domain.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.car_rental.domain.value_objects.date_range import DateRange


@pytest.fixture
def car_service(car_repository):
    return CarService(car_repository)


class TestCarService:
    """Test cases for CarService."""

    async def test_list_and_get_are_public(self, car_service):
        """Test reading the catalog."""
        cars = await car_service.list_cars()

        assert [car.id for car in cars] == [10, 11, 12]
        assert (await car_service.get_car(11)).model == "Golf"

    async def test_get_missing_car(self, car_service):
        """Test reading an unknown car."""
        with pytest.raises(NotFoundError, match="Car not found: 99"):
            await car_service.get_car(99)

    async def test_admin_creates_car(self, car_service, admin):
        """Test adding a car to the fleet."""
        car = await car_service.create_car(admin, "Ford", "Focus", 1.0, EngineType.PETROL)

        assert car.id == 13
        assert (await car_service.get_car(13)).brand == "Ford"

    async def test_user_cannot_create_car(self, car_service, alice):
        """Test that fleet changes are admin-only."""
        with pytest.raises(AuthorizationError):
            await car_service.create_car(alice, "Ford", "Focus", 1.0, EngineType.PETROL)

    async def test_create_car_with_invalid_capacity(self, car_service, admin):
        """Test that engine capacity bounds are enforced."""
        with pytest.raises(ValidationError, match="Invalid engine capacity"):
            await car_service.create_car(admin, "Ford", "Focus", 8.01, EngineType.PETROL)

    async def test_update_car(self, car_service, admin):
        """Test replacing car details."""
        car = await car_service.update_car(admin, 10, "Toyota", "Corolla GR", 1.6, "Petrol")

        assert car.model == "Corolla GR"
        assert (await car_service.get_car(10)).model == "Corolla GR"

    async def test_delete_car_removes_associations(self, car_service, store, booking_repository,
                                                   booked_car_repository, admin):
        """Test that deleting a car drops its booking links but keeps the booking."""
        booking = await booking_repository.save(
            Booking(2, DateRange(date(2024, 6, 1), date(2024, 6, 5)), Decimal("150"))
        )
        await booked_car_repository.save(BookedCar(booking.id, 10))
        await booked_car_repository.save(BookedCar(booking.id, 11))

        await car_service.delete_car(admin, 10)

        assert 10 not in store.cars
        assert [bc.car_id for bc in store.booked_cars.values()] == [11]
        assert booking.id in store.bookings

    async def test_delete_missing_car(self, car_service, admin):
        """Test deleting an unknown car."""
        with pytest.raises(NotFoundError):
            await car_service.delete_car(admin, 99)
