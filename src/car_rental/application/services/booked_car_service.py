"""Administrative management of booking/car associations."""

from typing import List, Optional

from ..ports.repositories import BookedCarRepository, BookingRepository, CarRepository
from .access_policy import AccessPolicy
from .availability_service import AvailabilityService
from ...domain.entities.booking import BookedCar, Booking
from ...domain.exceptions import ConflictError, NotFoundError
from ...domain.value_objects.auth import Identity


class BookedCarService:
    """Admin-only CRUD over BookedCar rows.

    Linking a car to a booking re-runs the availability check for the
    booking's range, so manual edits cannot double-book a car.
    """

    def __init__(
        self,
        booked_car_repository: BookedCarRepository,
        booking_repository: BookingRepository,
        car_repository: CarRepository
    ):
        self._booked_car_repository = booked_car_repository
        self._booking_repository = booking_repository
        self._car_repository = car_repository
        self._availability = AvailabilityService(booking_repository, car_repository)

    async def create(self, identity: Identity, booking_id: int, car_id: int) -> BookedCar:
        AccessPolicy.ensure_admin(identity)

        async with self._booking_repository.lock_booking(booking_id):
            booking = await self._validate_link(booking_id, car_id)

            async with self._car_repository.lock_for_booking([car_id]):
                await self._ensure_car_free(car_id, booking)
                return await self._booked_car_repository.save(BookedCar(booking_id, car_id))

    async def list_all(self, identity: Identity) -> List[BookedCar]:
        AccessPolicy.ensure_admin(identity)
        return await self._booked_car_repository.find_all()

    async def get(self, identity: Identity, booked_car_id: int) -> BookedCar:
        AccessPolicy.ensure_admin(identity)
        booked_car = await self._booked_car_repository.find_by_id(booked_car_id)
        if not booked_car:
            raise NotFoundError("Booked car", booked_car_id)
        return booked_car

    async def update(
        self,
        identity: Identity,
        booked_car_id: int,
        booking_id: int,
        car_id: int
    ) -> BookedCar:
        booked_car = await self.get(identity, booked_car_id)

        async with self._booking_repository.lock_booking(booking_id):
            booking = await self._validate_link(booking_id, car_id)

            async with self._car_repository.lock_for_booking([car_id]):
                if booked_car.car_id != car_id or booked_car.booking_id != booking_id:
                    # Moving the car off its old booking frees that booking's hold on it
                    exclude = booked_car.booking_id if booked_car.car_id == car_id else None
                    await self._ensure_car_free(car_id, booking, exclude_booking_id=exclude)
                booked_car.relink(booking_id, car_id)
                return await self._booked_car_repository.save(booked_car)

    async def delete(self, identity: Identity, booked_car_id: int) -> None:
        AccessPolicy.ensure_admin(identity)
        if not await self._booked_car_repository.delete(booked_car_id):
            raise NotFoundError("Booked car", booked_car_id)

    async def _validate_link(self, booking_id: int, car_id: int) -> Booking:
        booking = await self._booking_repository.find_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        if not await self._car_repository.find_by_id(car_id):
            raise NotFoundError("Car", car_id)
        return booking

    async def _ensure_car_free(
        self,
        car_id: int,
        booking: Booking,
        exclude_booking_id: Optional[int] = None
    ) -> None:
        if not await self._availability.is_car_available(car_id, booking.date_range, exclude_booking_id):
            raise ConflictError([car_id])
