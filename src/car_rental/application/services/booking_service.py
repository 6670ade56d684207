"""Booking service implementing the reservation lifecycle."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Sequence

from ..ports.repositories import (
    BookedCarRepository,
    BookingRepository,
    CarRepository,
    UserRepository,
)
from .access_policy import AccessPolicy
from .availability_service import AvailabilityService
from ...domain.entities.booking import BookedCar, Booking
from ...domain.entities.car import Car
from ...domain.exceptions import ConflictError, NotFoundError, ValidationError
from ...domain.value_objects.auth import Identity
from ...domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.logging import get_logger, log_business_rule_violation


DEFAULT_BOOKING_PRICE = Decimal("150.00")


class PricingStrategy(ABC):
    """Computes the price of a new booking."""

    @abstractmethod
    def quote(self, car_ids: Sequence[int], date_range: DateRange) -> Decimal:
        raise NotImplementedError


class FlatRatePricing(PricingStrategy):
    """Same price for every booking regardless of cars or duration."""

    def __init__(self, amount: Decimal = DEFAULT_BOOKING_PRICE):
        self.amount = Decimal(str(amount))

    def quote(self, car_ids: Sequence[int], date_range: DateRange) -> Decimal:
        return self.amount


class BookingService:
    """Application service for booking management."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        booked_car_repository: BookedCarRepository,
        car_repository: CarRepository,
        user_repository: UserRepository,
        pricing: Optional[PricingStrategy] = None
    ):
        self._booking_repository = booking_repository
        self._booked_car_repository = booked_car_repository
        self._car_repository = car_repository
        self._user_repository = user_repository
        self._pricing = pricing or FlatRatePricing()
        self._availability = AvailabilityService(booking_repository, car_repository)
        self._logger = get_logger(__name__)

    async def create_booking(
        self,
        identity: Identity,
        user_id: int,
        car_ids: Sequence[int],
        date_range: DateRange
    ) -> Booking:
        """Reserve one or more cars for a user over a date range.

        Every requested car is checked and all conflicts are reported
        together. The checks and the writes run while the cars are locked,
        so two concurrent requests for the same car cannot both succeed.
        """
        AccessPolicy.ensure(identity, user_id)

        requested = list(dict.fromkeys(car_ids))
        if not requested:
            raise ValidationError("At least one car must be selected")

        if not await self._user_repository.exists(user_id):
            raise NotFoundError("User", user_id)

        await self._ensure_cars_exist(requested)

        async with self._car_repository.lock_for_booking(requested):
            unavailable = await self._availability.find_unavailable_cars(requested, date_range)
            if unavailable:
                log_business_rule_violation(
                    self._logger,
                    "car_double_booking",
                    f"cars {unavailable} already booked for {date_range}",
                    user_id=user_id,
                    unavailable_cars=unavailable
                )
                raise ConflictError(unavailable)

            booking = Booking(
                user_id=user_id,
                date_range=date_range,
                price=self._pricing.quote(requested, date_range)
            )
            booking = await self._booking_repository.save(booking)

            await self._booked_car_repository.save_all(
                [BookedCar(booking_id=booking.id, car_id=car_id) for car_id in requested]
            )

        self._logger.info(
            "Booking created",
            extra={"booking_id": booking.id, "user_id": user_id, "car_ids": requested,
                   "date_range": str(date_range)}
        )
        return booking

    async def update_booking(
        self,
        identity: Identity,
        booking_id: int,
        date_range: DateRange,
        user_id: Optional[int] = None,
        price: Optional[Decimal] = None
    ) -> Booking:
        """Reschedule a booking, re-checking its cars against the new range.

        The booking is locked before its car links are read, so no car can be
        linked to it between the availability check and the save.
        """
        async with self._booking_repository.lock_booking(booking_id):
            booking = await self._get_existing(booking_id)
            AccessPolicy.ensure(identity, booking.user_id)

            if user_id is not None and user_id != booking.user_id:
                AccessPolicy.ensure(identity, user_id)
                if not await self._user_repository.exists(user_id):
                    raise NotFoundError("User", user_id)

            car_ids = [bc.car_id for bc in await self._booked_car_repository.find_by_booking_id(booking_id)]

            async with self._car_repository.lock_for_booking(car_ids):
                unavailable = await self._availability.find_unavailable_cars(
                    car_ids, date_range, exclude_booking_id=booking_id
                )
                if unavailable:
                    log_business_rule_violation(
                        self._logger,
                        "car_double_booking",
                        f"cars {unavailable} already booked for {date_range}",
                        booking_id=booking_id,
                        unavailable_cars=unavailable
                    )
                    raise ConflictError(unavailable)

                booking.reschedule(date_range, user_id=user_id, price=price)
                booking = await self._booking_repository.save(booking)

        self._logger.info("Booking updated", extra={"booking_id": booking_id})
        return booking

    async def delete_booking(self, identity: Identity, booking_id: int) -> None:
        """Delete a booking together with its car associations."""
        booking = await self._get_existing(booking_id)
        AccessPolicy.ensure(identity, booking.user_id)

        await self._booking_repository.delete(booking_id)
        self._logger.info("Booking deleted", extra={"booking_id": booking_id})

    async def list_bookings(self, identity: Identity) -> List[Booking]:
        """List every booking (admin only)."""
        AccessPolicy.ensure_admin(identity)
        return await self._booking_repository.find_all()

    async def get_user_bookings(self, identity: Identity, user_id: int) -> List[Booking]:
        """Get all bookings for a user."""
        AccessPolicy.ensure(identity, user_id)
        if not await self._user_repository.exists(user_id):
            raise NotFoundError("User", user_id)
        return await self._booking_repository.find_by_user_id(user_id)

    async def get_booking(self, identity: Identity, booking_id: int) -> Booking:
        """Get a specific booking by ID."""
        booking = await self._get_existing(booking_id)
        AccessPolicy.ensure(identity, booking.user_id)
        return booking

    async def get_booking_cars(self, identity: Identity, booking_id: int) -> List[Car]:
        """Get the cars reserved under a booking."""
        booking = await self.get_booking(identity, booking_id)
        links = await self._booked_car_repository.find_by_booking_id(booking.id)
        return await self._car_repository.find_by_ids([link.car_id for link in links])

    async def _get_existing(self, booking_id: int) -> Booking:
        booking = await self._booking_repository.find_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)
        return booking

    async def _ensure_cars_exist(self, car_ids: List[int]) -> None:
        found = {car.id for car in await self._car_repository.find_by_ids(car_ids)}
        missing = [car_id for car_id in car_ids if car_id not in found]
        if missing:
            raise NotFoundError("Car", ", ".join(str(car_id) for car_id in missing))
