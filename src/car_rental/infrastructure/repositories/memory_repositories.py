"""In-memory repository implementations.

Used for tests and for running the API without a database. All four
repositories share one ``InMemoryStore`` so deletes can cascade across
tables the way the SQL schema does.
"""

import asyncio
import copy
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence

from src.car_rental.application.ports.repositories import (
    BookedCarRepository,
    BookingRepository,
    CarRepository,
    UserRepository,
)
from src.car_rental.domain.entities.booking import BookedCar, Booking
from src.car_rental.domain.entities.car import Car
from src.car_rental.domain.entities.user import User
from src.car_rental.domain.value_objects.date_range import DateRange


class InMemoryStore:
    """Tables, ID sequences and row locks shared by the in-memory repositories."""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.cars: Dict[int, Car] = {}
        self.bookings: Dict[int, Booking] = {}
        self.booked_cars: Dict[int, BookedCar] = {}
        self._sequences: Dict[str, int] = {}
        self._car_locks: Dict[int, asyncio.Lock] = {}
        self._booking_locks: Dict[int, asyncio.Lock] = {}

    def next_id(self, table: str, requested: Optional[int] = None) -> int:
        """Return the next ID for a table, honouring an explicitly requested one."""
        current = self._sequences.get(table, 0)
        if requested is not None:
            self._sequences[table] = max(current, requested)
            return requested
        self._sequences[table] = current + 1
        return current + 1

    def car_lock(self, car_id: int) -> asyncio.Lock:
        if car_id not in self._car_locks:
            self._car_locks[car_id] = asyncio.Lock()
        return self._car_locks[car_id]

    def booking_lock(self, booking_id: int) -> asyncio.Lock:
        if booking_id not in self._booking_locks:
            self._booking_locks[booking_id] = asyncio.Lock()
        return self._booking_locks[booking_id]

    def remove_booking(self, booking_id: int) -> bool:
        for link_id in [k for k, v in self.booked_cars.items() if v.booking_id == booking_id]:
            del self.booked_cars[link_id]
        return self.bookings.pop(booking_id, None) is not None


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of user repository."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, user: User) -> User:
        if user.id is None or user.id not in self._store.users:
            user.assign_id(self._store.next_id("users", user.id))
        self._store.users[user.id] = copy.deepcopy(user)
        return user

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return copy.deepcopy(self._store.users.get(user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        sanitized_email = email.lower().strip()
        for user in self._store.users.values():
            if user.email == sanitized_email:
                return copy.deepcopy(user)
        return None

    async def find_all(self) -> List[User]:
        return [copy.deepcopy(self._store.users[k]) for k in sorted(self._store.users)]

    async def exists(self, user_id: int) -> bool:
        return user_id in self._store.users

    async def delete(self, user_id: int) -> bool:
        for booking_id in [k for k, v in self._store.bookings.items() if v.user_id == user_id]:
            self._store.remove_booking(booking_id)
        return self._store.users.pop(user_id, None) is not None


class InMemoryCarRepository(CarRepository):
    """In-memory implementation of car repository."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, car: Car) -> Car:
        if car.id is None or car.id not in self._store.cars:
            car.assign_id(self._store.next_id("cars", car.id))
        self._store.cars[car.id] = copy.deepcopy(car)
        return car

    async def find_by_id(self, car_id: int) -> Optional[Car]:
        return copy.deepcopy(self._store.cars.get(car_id))

    async def find_by_ids(self, car_ids: Sequence[int]) -> List[Car]:
        wanted = set(car_ids)
        return [copy.deepcopy(self._store.cars[k]) for k in sorted(self._store.cars) if k in wanted]

    async def find_all(self) -> List[Car]:
        return [copy.deepcopy(self._store.cars[k]) for k in sorted(self._store.cars)]

    async def find_available(self, date_range: DateRange) -> List[Car]:
        busy = {
            link.car_id
            for link in self._store.booked_cars.values()
            if link.booking_id in self._store.bookings
            and self._store.bookings[link.booking_id].overlaps(date_range)
        }
        return [copy.deepcopy(self._store.cars[k]) for k in sorted(self._store.cars) if k not in busy]

    @asynccontextmanager
    async def lock_for_booking(self, car_ids: Sequence[int]) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            for car_id in sorted(set(car_ids)):
                await stack.enter_async_context(self._store.car_lock(car_id))
            yield

    async def delete(self, car_id: int) -> bool:
        for link_id in [k for k, v in self._store.booked_cars.items() if v.car_id == car_id]:
            del self._store.booked_cars[link_id]
        return self._store.cars.pop(car_id, None) is not None


class InMemoryBookingRepository(BookingRepository):
    """In-memory implementation of booking repository."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, booking: Booking) -> Booking:
        if booking.id is None or booking.id not in self._store.bookings:
            booking.assign_id(self._store.next_id("bookings", booking.id))
        self._store.bookings[booking.id] = copy.deepcopy(booking)
        return booking

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        return copy.deepcopy(self._store.bookings.get(booking_id))

    async def find_all(self) -> List[Booking]:
        return [copy.deepcopy(self._store.bookings[k]) for k in sorted(self._store.bookings)]

    async def find_by_user_id(self, user_id: int) -> List[Booking]:
        bookings = [b for b in self._store.bookings.values() if b.user_id == user_id]
        bookings.sort(key=lambda b: b.checkin_date, reverse=True)
        return [copy.deepcopy(b) for b in bookings]

    async def has_overlapping_booking(
        self,
        car_id: int,
        date_range: DateRange,
        exclude_booking_id: Optional[int] = None
    ) -> bool:
        for link in list(self._store.booked_cars.values()):
            if link.car_id != car_id or link.booking_id == exclude_booking_id:
                continue
            booking = self._store.bookings.get(link.booking_id)
            if booking is not None and booking.overlaps(date_range):
                return True
        return False

    @asynccontextmanager
    async def lock_booking(self, booking_id: int) -> AsyncIterator[None]:
        async with self._store.booking_lock(booking_id):
            yield

    async def delete(self, booking_id: int) -> bool:
        return self._store.remove_booking(booking_id)


class InMemoryBookedCarRepository(BookedCarRepository):
    """In-memory implementation of booking/car association repository."""

    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, booked_car: BookedCar) -> BookedCar:
        if booked_car.id is None or booked_car.id not in self._store.booked_cars:
            booked_car.assign_id(self._store.next_id("booked_cars", booked_car.id))
        self._store.booked_cars[booked_car.id] = copy.deepcopy(booked_car)
        return booked_car

    async def save_all(self, booked_cars: Sequence[BookedCar]) -> List[BookedCar]:
        return [await self.save(booked_car) for booked_car in booked_cars]

    async def find_by_id(self, booked_car_id: int) -> Optional[BookedCar]:
        return copy.deepcopy(self._store.booked_cars.get(booked_car_id))

    async def find_all(self) -> List[BookedCar]:
        return [copy.deepcopy(self._store.booked_cars[k]) for k in sorted(self._store.booked_cars)]

    async def find_by_booking_id(self, booking_id: int) -> List[BookedCar]:
        return [
            copy.deepcopy(self._store.booked_cars[k])
            for k in sorted(self._store.booked_cars)
            if self._store.booked_cars[k].booking_id == booking_id
        ]

    async def delete(self, booked_car_id: int) -> bool:
        return self._store.booked_cars.pop(booked_car_id, None) is not None