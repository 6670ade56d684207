"""Booking and BookedCar entities for rental reservations."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..value_objects.date_range import DateRange


class Booking:
    """Booking entity: a user's reservation of one or more cars for a date range."""

    def __init__(
        self,
        user_id: int,
        date_range: DateRange,
        price: Decimal,
        booking_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self._id = booking_id
        self._user_id = user_id
        self._date_range = date_range
        self._price = Decimal(str(price))
        self._created_at = created_at or datetime.utcnow()
        self._updated_at = updated_at or datetime.utcnow()

    @property
    def id(self) -> Optional[int]:
        """Get booking ID (None until persisted)."""
        return self._id

    @property
    def user_id(self) -> int:
        """Get owning user ID."""
        return self._user_id

    @property
    def date_range(self) -> DateRange:
        return self._date_range

    @property
    def checkin_date(self) -> date:
        return self._date_range.checkin

    @property
    def checkout_date(self) -> date:
        return self._date_range.checkout

    @property
    def price(self) -> Decimal:
        return self._price

    @property
    def created_at(self) -> datetime:
        """Get creation timestamp."""
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        """Get last update timestamp."""
        return self._updated_at

    def assign_id(self, booking_id: int) -> None:
        self._id = booking_id

    def is_owned_by(self, user_id: int) -> bool:
        return self._user_id == user_id

    def reschedule(
        self,
        date_range: DateRange,
        user_id: Optional[int] = None,
        price: Optional[Decimal] = None
    ) -> None:
        """Overwrite the booking period, and optionally owner and price."""
        self._date_range = date_range
        if user_id is not None:
            self._user_id = user_id
        if price is not None:
            self._price = Decimal(str(price))
        self._updated_at = datetime.utcnow()

    def overlaps(self, date_range: DateRange) -> bool:
        """Check if this booking conflicts with a requested range."""
        return date_range.overlaps(self._date_range)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Booking):
            return False
        return self._id is not None and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"Booking({self._id}, user={self._user_id}, {self._date_range})"


class BookedCar:
    """Association entity: a car reserved under a booking.

    Has no period of its own; its temporal extent is the booking's range.
    """

    def __init__(
        self,
        booking_id: int,
        car_id: int,
        booked_car_id: Optional[int] = None,
        created_at: Optional[datetime] = None
    ):
        self._id = booked_car_id
        self._booking_id = booking_id
        self._car_id = car_id
        self._created_at = created_at or datetime.utcnow()

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def booking_id(self) -> int:
        return self._booking_id

    @property
    def car_id(self) -> int:
        return self._car_id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def assign_id(self, booked_car_id: int) -> None:
        self._id = booked_car_id

    def relink(self, booking_id: int, car_id: int) -> None:
        self._booking_id = booking_id
        self._car_id = car_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BookedCar):
            return False
        return self._id is not None and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"BookedCar(id={self._id}, booking_id={self._booking_id}, car_id={self._car_id})"
