"""Dependency injection and service factory."""

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncGenerator, NamedTuple, Optional

from src.car_rental.application.ports.repositories import (
    BookedCarRepository,
    BookingRepository,
    CarRepository,
    UserRepository,
)
from src.car_rental.application.services.auth_service import AuthenticationService
from src.car_rental.application.services.availability_service import AvailabilityService
from src.car_rental.application.services.booked_car_service import BookedCarService
from src.car_rental.application.services.booking_service import (
    DEFAULT_BOOKING_PRICE,
    BookingService,
    FlatRatePricing,
)
from src.car_rental.application.services.car_service import CarService
from src.car_rental.application.services.user_service import UserService
from src.car_rental.infrastructure.database.connection import DatabaseManager
from src.car_rental.infrastructure.logging import get_logger
from src.car_rental.infrastructure.repositories.memory_repositories import (
    InMemoryBookedCarRepository,
    InMemoryBookingRepository,
    InMemoryCarRepository,
    InMemoryStore,
    InMemoryUserRepository,
)
from src.car_rental.infrastructure.repositories.sql_repositories import (
    SQLAlchemyBookedCarRepository,
    SQLAlchemyBookingRepository,
    SQLAlchemyCarRepository,
    SQLAlchemyUserRepository,
)
from src.car_rental.infrastructure.tokens import JWTTokenService


class Repositories(NamedTuple):
    """Repositories bound to one unit of work."""

    users: UserRepository
    cars: CarRepository
    bookings: BookingRepository
    booked_cars: BookedCarRepository


class ServiceFactory:
    """Factory for creating application services with proper dependencies.

    Every ``get_*_service`` context is one unit of work: the services it
    yields share a database session that commits when the block exits
    cleanly and rolls back otherwise.
    """

    def __init__(
        self,
        database_url: str,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
        booking_price: Decimal = DEFAULT_BOOKING_PRICE,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_pre_ping: bool = True
    ):
        self.database_manager = DatabaseManager(
            database_url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping
        )
        self._connected = False
        self._token_service = JWTTokenService(secret_key, algorithm, access_token_expire_minutes)
        self._pricing = FlatRatePricing(booking_price)
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings) -> "ServiceFactory":
        """Build a factory from application settings."""
        return cls(
            database_url=settings.database_url,
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            access_token_expire_minutes=settings.access_token_expire_minutes,
            booking_price=settings.booking_flat_price,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping
        )

    async def initialize(self):
        """Initialize the service factory."""
        if not self._connected:
            await self.database_manager.connect()
            self._connected = True
            self._logger.info("Database connection established")

    async def shutdown(self):
        """Shutdown the service factory."""
        if self._connected:
            await self.database_manager.disconnect()
            self._connected = False
            self._logger.info("Database connection closed")

    @asynccontextmanager
    async def _repositories(self) -> AsyncGenerator[Repositories, None]:
        async with self.database_manager.get_session() as session:
            yield Repositories(
                users=SQLAlchemyUserRepository(session),
                cars=SQLAlchemyCarRepository(session),
                bookings=SQLAlchemyBookingRepository(session),
                booked_cars=SQLAlchemyBookedCarRepository(session)
            )

    def get_token_service(self) -> JWTTokenService:
        """Token service is stateless and shared across requests."""
        return self._token_service

    @asynccontextmanager
    async def get_booking_service(self) -> AsyncGenerator[BookingService, None]:
        """Get booking service with database repositories."""
        async with self._repositories() as repos:
            yield BookingService(
                booking_repository=repos.bookings,
                booked_car_repository=repos.booked_cars,
                car_repository=repos.cars,
                user_repository=repos.users,
                pricing=self._pricing
            )

    @asynccontextmanager
    async def get_availability_service(self) -> AsyncGenerator[AvailabilityService, None]:
        async with self._repositories() as repos:
            yield AvailabilityService(
                booking_repository=repos.bookings,
                car_repository=repos.cars
            )

    @asynccontextmanager
    async def get_car_service(self) -> AsyncGenerator[CarService, None]:
        async with self._repositories() as repos:
            yield CarService(car_repository=repos.cars)

    @asynccontextmanager
    async def get_user_service(self) -> AsyncGenerator[UserService, None]:
        async with self._repositories() as repos:
            yield UserService(user_repository=repos.users)

    @asynccontextmanager
    async def get_booked_car_service(self) -> AsyncGenerator[BookedCarService, None]:
        async with self._repositories() as repos:
            yield BookedCarService(
                booked_car_repository=repos.booked_cars,
                booking_repository=repos.bookings,
                car_repository=repos.cars
            )

    @asynccontextmanager
    async def get_auth_service(self) -> AsyncGenerator[AuthenticationService, None]:
        """Get authentication service with database repositories."""
        async with self._repositories() as repos:
            yield AuthenticationService(
                user_repository=repos.users,
                token_service=self._token_service
            )


class InMemoryServiceFactory(ServiceFactory):
    """Service factory backed by an ``InMemoryStore`` instead of a database."""

    def __init__(
        self,
        secret_key: str = "in-memory-secret-key",
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
        booking_price: Decimal = DEFAULT_BOOKING_PRICE,
        store: Optional[InMemoryStore] = None
    ):
        self.store = store or InMemoryStore()
        self._token_service = JWTTokenService(secret_key, algorithm, access_token_expire_minutes)
        self._pricing = FlatRatePricing(booking_price)
        self._logger = get_logger(__name__)

    async def initialize(self):
        self._logger.info("Using in-memory storage")

    async def shutdown(self):
        pass

    @asynccontextmanager
    async def _repositories(self) -> AsyncGenerator[Repositories, None]:
        yield Repositories(
            users=InMemoryUserRepository(self.store),
            cars=InMemoryCarRepository(self.store),
            bookings=InMemoryBookingRepository(self.store),
            booked_cars=InMemoryBookedCarRepository(self.store)
        )
