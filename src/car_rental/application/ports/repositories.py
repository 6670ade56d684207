"""Port interfaces for repositories (Dependency Inversion Principle)."""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from src.car_rental.domain.entities.user import User
    from src.car_rental.domain.entities.car import Car
    from src.car_rental.domain.entities.booking import Booking, BookedCar
    from src.car_rental.domain.value_objects.date_range import DateRange


class UserRepository(ABC):
    """Port interface for user repository."""

    @abstractmethod
    async def save(self, user: "User") -> "User":
        """Insert or update a user; assigns the ID on insert."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional["User"]:
        """Find user by ID."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional["User"]:
        """Find user by email."""
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> List["User"]:
        """Find all users."""
        raise NotImplementedError

    @abstractmethod
    async def exists(self, user_id: int) -> bool:
        """Check if user exists."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, user_id: int) -> bool:
        """Delete a user together with their bookings."""
        raise NotImplementedError


class CarRepository(ABC):
    """Port interface for car repository."""

    @abstractmethod
    async def save(self, car: "Car") -> "Car":
        """Insert or update a car; assigns the ID on insert."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, car_id: int) -> Optional["Car"]:
        """Find car by ID."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_ids(self, car_ids: Sequence[int]) -> List["Car"]:
        """Find the cars matching the given IDs."""
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> List["Car"]:
        """Find all cars."""
        raise NotImplementedError

    @abstractmethod
    async def find_available(self, date_range: "DateRange") -> List["Car"]:
        """Find cars with no booking overlapping the range."""
        raise NotImplementedError

    @abstractmethod
    def lock_for_booking(self, car_ids: Sequence[int]) -> AsyncContextManager[None]:
        """Serialize booking writes for the given cars.

        Inside the context no other booking for these cars can be checked or
        written until the current unit of work ends.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, car_id: int) -> bool:
        """Delete a car and its booking associations."""
        raise NotImplementedError


class BookingRepository(ABC):
    """Port interface for booking repository."""

    @abstractmethod
    async def save(self, booking: "Booking") -> "Booking":
        """Insert or update a booking; assigns the ID on insert."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, booking_id: int) -> Optional["Booking"]:
        """Find booking by ID."""
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> List["Booking"]:
        """Find all bookings."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_user_id(self, user_id: int) -> List["Booking"]:
        """Find all bookings for a user."""
        raise NotImplementedError

    @abstractmethod
    async def has_overlapping_booking(
        self,
        car_id: int,
        date_range: "DateRange",
        exclude_booking_id: Optional[int] = None
    ) -> bool:
        """Check if any booking of the car overlaps the range."""
        raise NotImplementedError

    @abstractmethod
    def lock_booking(self, booking_id: int) -> AsyncContextManager[None]:
        """Serialize changes to one booking's dates and car links.

        Taken before any car lock, so a reschedule and a manual car link on
        the same booking cannot interleave.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, booking_id: int) -> bool:
        """Delete a booking and its car associations."""
        raise NotImplementedError


class BookedCarRepository(ABC):
    """Port interface for booking/car association repository."""

    @abstractmethod
    async def save(self, booked_car: "BookedCar") -> "BookedCar":
        """Insert or update an association; assigns the ID on insert."""
        raise NotImplementedError

    @abstractmethod
    async def save_all(self, booked_cars: Sequence["BookedCar"]) -> List["BookedCar"]:
        """Insert several associations in the current unit of work."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, booked_car_id: int) -> Optional["BookedCar"]:
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> List["BookedCar"]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_booking_id(self, booking_id: int) -> List["BookedCar"]:
        """Find the associations belonging to a booking."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, booked_car_id: int) -> bool:
        raise NotImplementedError
