"""Car availability checks and the available-cars catalog query."""

from typing import List, Optional

from ..ports.repositories import BookingRepository, CarRepository
from ...domain.entities.car import Car
from ...domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.logging import get_logger


class AvailabilityService:
    """Read-only queries built on the booking overlap predicate."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        car_repository: CarRepository
    ):
        self._booking_repository = booking_repository
        self._car_repository = car_repository
        self._logger = get_logger(__name__)

    async def is_car_available(
        self,
        car_id: int,
        date_range: DateRange,
        exclude_booking_id: Optional[int] = None
    ) -> bool:
        """Check that no booking of the car overlaps the range.

        ``exclude_booking_id`` skips one booking, so a booking being
        rescheduled does not conflict with itself.
        """
        conflict = await self._booking_repository.has_overlapping_booking(
            car_id, date_range, exclude_booking_id=exclude_booking_id
        )
        self._logger.debug(
            "Car availability checked",
            extra={"car_id": car_id, "date_range": str(date_range), "available": not conflict}
        )
        return not conflict

    async def find_unavailable_cars(
        self,
        car_ids: List[int],
        date_range: DateRange,
        exclude_booking_id: Optional[int] = None
    ) -> List[int]:
        """Return every car in ``car_ids`` that is taken for the range, in request order."""
        unavailable = []
        for car_id in car_ids:
            if not await self.is_car_available(car_id, date_range, exclude_booking_id):
                unavailable.append(car_id)
        return unavailable

    async def list_available_cars(self, date_range: DateRange) -> List[Car]:
        """List the cars with no overlapping booking for the range."""
        return await self._car_repository.find_available(date_range)
