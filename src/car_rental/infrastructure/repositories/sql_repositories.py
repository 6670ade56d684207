"""SQLAlchemy repository implementations."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional, Sequence

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.car_rental.infrastructure.logging import (
    get_logger,
    log_database_operation
)

from src.car_rental.application.ports.repositories import (
    BookedCarRepository,
    BookingRepository,
    CarRepository,
    UserRepository,
)
from src.car_rental.domain.entities.booking import BookedCar, Booking
from src.car_rental.domain.entities.car import Car
from src.car_rental.domain.entities.user import User
from src.car_rental.domain.exceptions import DuplicateError
from src.car_rental.domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.database.models import (
    BookedCarModel,
    BookingModel,
    CarModel,
    UserModel,
)


def booking_overlap_clause(date_range: DateRange):
    """SQL form of the overlap predicate against BookingModel.

    Both bounds are inclusive, matching DateRange.overlaps.
    """
    return or_(
        BookingModel.checkin_date.between(date_range.checkin, date_range.checkout),
        BookingModel.checkout_date.between(date_range.checkin, date_range.checkout),
        and_(
            BookingModel.checkin_date <= date_range.checkin,
            BookingModel.checkout_date >= date_range.checkout,
        ),
    )


class SQLAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def save(self, user: User) -> User:
        """Save a user to the database."""
        existing_user = None
        if user.id is not None:
            existing_user = await self._session.get(UserModel, user.id)

        if existing_user:
            log_database_operation(self._logger, "UPDATE", "UserModel", user_id=user.id)
            existing_user.username = user.username
            existing_user.email = user.email
            existing_user.password_hash = user.password_hash
            existing_user.role = user.role
            existing_user.updated_at = datetime.utcnow()
            await self._flush_unique_email(user.email)
        else:
            log_database_operation(self._logger, "INSERT", "UserModel", email=user.email)
            user_model = UserModel(
                id=user.id,
                username=user.username,
                email=user.email,
                password_hash=user.password_hash,
                role=user.role,
                created_at=user.created_at,
                updated_at=datetime.utcnow()
            )
            self._session.add(user_model)
            await self._flush_unique_email(user.email)
            user.assign_id(user_model.id)

        return user

    async def _flush_unique_email(self, email: str) -> None:
        # A concurrent registration can pass the service-level check; the unique index decides
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise DuplicateError(f"Email already registered: {email}") from e

    async def find_by_id(self, user_id: int) -> Optional[User]:
        """Find user by ID."""
        user_model = await self._session.get(UserModel, user_id)
        if not user_model:
            return None
        return self._model_to_entity(user_model)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email."""
        sanitized_email = email.lower().strip()
        log_database_operation(self._logger, "SELECT", "UserModel", lookup_field="email")

        stmt = select(UserModel).where(UserModel.email == sanitized_email)
        result = await self._session.execute(stmt)
        user_model = result.scalar_one_or_none()

        if not user_model:
            return None
        return self._model_to_entity(user_model)

    async def find_all(self) -> List[User]:
        stmt = select(UserModel).order_by(UserModel.id)
        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def exists(self, user_id: int) -> bool:
        """Check if user exists."""
        stmt = select(func.count(UserModel.id)).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar() > 0

    async def delete(self, user_id: int) -> bool:
        """Delete a user, their bookings and the bookings' car associations."""
        log_database_operation(self._logger, "DELETE", "UserModel", user_id=user_id)

        booking_ids = select(BookingModel.id).where(BookingModel.user_id == user_id)
        await self._session.execute(
            delete(BookedCarModel).where(BookedCarModel.booking_id.in_(booking_ids))
        )
        await self._session.execute(delete(BookingModel).where(BookingModel.user_id == user_id))
        result = await self._session.execute(delete(UserModel).where(UserModel.id == user_id))

        return result.rowcount > 0

    def _model_to_entity(self, model: UserModel) -> User:
        """Convert database model to domain entity."""
        return User(
            user_id=model.id,
            username=model.username,
            email=model.email,
            password_hash=model.password_hash,
            role=model.role,
            created_at=model.created_at,
            updated_at=model.updated_at
        )


class SQLAlchemyCarRepository(CarRepository):
    """SQLAlchemy implementation of car repository."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def save(self, car: Car) -> Car:
        """Save a car to the database."""
        existing_car = None
        if car.id is not None:
            existing_car = await self._session.get(CarModel, car.id)

        if existing_car:
            existing_car.brand = car.brand
            existing_car.model = car.model
            existing_car.engine_capacity = car.engine_capacity
            existing_car.engine_type = car.engine_type
            existing_car.updated_at = datetime.utcnow()
            await self._session.flush()
        else:
            car_model = CarModel(
                id=car.id,
                brand=car.brand,
                model=car.model,
                engine_capacity=car.engine_capacity,
                engine_type=car.engine_type,
                created_at=car.created_at,
                updated_at=datetime.utcnow()
            )
            self._session.add(car_model)
            await self._session.flush()
            car.assign_id(car_model.id)

        return car

    async def find_by_id(self, car_id: int) -> Optional[Car]:
        car_model = await self._session.get(CarModel, car_id)
        if not car_model:
            return None
        return self._model_to_entity(car_model)

    async def find_by_ids(self, car_ids: Sequence[int]) -> List[Car]:
        if not car_ids:
            return []
        stmt = select(CarModel).where(CarModel.id.in_(list(car_ids))).order_by(CarModel.id)
        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_all(self) -> List[Car]:
        stmt = select(CarModel).order_by(CarModel.id)
        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_available(self, date_range: DateRange) -> List[Car]:
        """Find cars with no overlapping booking (anti-join on the overlap predicate)."""
        log_database_operation(
            self._logger,
            "SELECT",
            "CarModel",
            operation="availability_listing",
            date_range=str(date_range)
        )

        booked_car_ids = (
            select(BookedCarModel.car_id)
            .join(BookingModel, BookingModel.id == BookedCarModel.booking_id)
            .where(booking_overlap_clause(date_range))
        )
        stmt = select(CarModel).where(CarModel.id.not_in(booked_car_ids)).order_by(CarModel.id)

        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @asynccontextmanager
    async def lock_for_booking(self, car_ids: Sequence[int]) -> AsyncIterator[None]:
        """Take row locks on the cars; they are held until the transaction ends."""
        if car_ids:
            # Fixed lock order avoids deadlocks between multi-car bookings
            stmt = (
                select(CarModel.id)
                .where(CarModel.id.in_(sorted(set(car_ids))))
                .order_by(CarModel.id)
                .with_for_update()
            )
            await self._session.execute(stmt)
        yield

    async def delete(self, car_id: int) -> bool:
        """Delete a car and its booking associations."""
        log_database_operation(self._logger, "DELETE", "CarModel", car_id=car_id)

        await self._session.execute(delete(BookedCarModel).where(BookedCarModel.car_id == car_id))
        result = await self._session.execute(delete(CarModel).where(CarModel.id == car_id))

        return result.rowcount > 0

    def _model_to_entity(self, model: CarModel) -> Car:
        return Car(
            car_id=model.id,
            brand=model.brand,
            model=model.model,
            engine_capacity=model.engine_capacity,
            engine_type=model.engine_type,
            created_at=model.created_at,
            updated_at=model.updated_at
        )


class SQLAlchemyBookingRepository(BookingRepository):
    """SQLAlchemy implementation of booking repository."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def save(self, booking: Booking) -> Booking:
        """Save a booking to the database."""
        existing_booking = None
        if booking.id is not None:
            existing_booking = await self._session.get(BookingModel, booking.id)

        if existing_booking:
            existing_booking.user_id = booking.user_id
            existing_booking.checkin_date = booking.checkin_date
            existing_booking.checkout_date = booking.checkout_date
            existing_booking.price = booking.price
            existing_booking.updated_at = datetime.utcnow()
            await self._session.flush()
        else:
            booking_model = BookingModel(
                id=booking.id,
                user_id=booking.user_id,
                checkin_date=booking.checkin_date,
                checkout_date=booking.checkout_date,
                price=booking.price,
                created_at=booking.created_at,
                updated_at=datetime.utcnow()
            )
            self._session.add(booking_model)
            await self._session.flush()
            booking.assign_id(booking_model.id)

        return booking

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        booking_model = await self._session.get(BookingModel, booking_id)
        if not booking_model:
            return None
        return self._model_to_entity(booking_model)

    async def find_all(self) -> List[Booking]:
        stmt = select(BookingModel).order_by(BookingModel.id)
        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_by_user_id(self, user_id: int) -> List[Booking]:
        """Find all bookings for a user."""
        stmt = select(BookingModel).where(
            BookingModel.user_id == user_id
        ).order_by(BookingModel.checkin_date.desc())

        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def has_overlapping_booking(
        self,
        car_id: int,
        date_range: DateRange,
        exclude_booking_id: Optional[int] = None
    ) -> bool:
        """Check if any booking of the car overlaps the range."""
        log_database_operation(
            self._logger,
            "SELECT",
            "BookedCarModel",
            operation="availability_check",
            car_id=car_id,
            date_range=str(date_range)
        )

        conditions = [BookedCarModel.car_id == car_id, booking_overlap_clause(date_range)]
        if exclude_booking_id is not None:
            conditions.append(BookingModel.id != exclude_booking_id)

        stmt = (
            select(func.count(BookedCarModel.id))
            .join(BookingModel, BookingModel.id == BookedCarModel.booking_id)
            .where(and_(*conditions))
        )
        result = await self._session.execute(stmt)
        return result.scalar() > 0

    @asynccontextmanager
    async def lock_booking(self, booking_id: int) -> AsyncIterator[None]:
        """Row-lock the booking until the transaction ends and reload its current state."""
        stmt = (
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        await self._session.execute(stmt)
        yield

    async def delete(self, booking_id: int) -> bool:
        """Delete a booking and its car associations."""
        log_database_operation(self._logger, "DELETE", "BookingModel", booking_id=booking_id)

        await self._session.execute(
            delete(BookedCarModel).where(BookedCarModel.booking_id == booking_id)
        )
        result = await self._session.execute(delete(BookingModel).where(BookingModel.id == booking_id))

        success = result.rowcount > 0
        if not success:
            self._logger.warning(
                "Booking deletion failed - not found",
                extra={"booking_id": booking_id}
            )
        return success

    def _model_to_entity(self, model: BookingModel) -> Booking:
        """Convert database model to domain entity."""
        return Booking(
            booking_id=model.id,
            user_id=model.user_id,
            date_range=DateRange(model.checkin_date, model.checkout_date),
            price=model.price,
            created_at=model.created_at,
            updated_at=model.updated_at
        )


class SQLAlchemyBookedCarRepository(BookedCarRepository):
    """SQLAlchemy implementation of booking/car association repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, booked_car: BookedCar) -> BookedCar:
        existing = None
        if booked_car.id is not None:
            existing = await self._session.get(BookedCarModel, booked_car.id)

        if existing:
            existing.booking_id = booked_car.booking_id
            existing.car_id = booked_car.car_id
            await self._session.flush()
        else:
            model = self._entity_to_model(booked_car)
            self._session.add(model)
            await self._session.flush()
            booked_car.assign_id(model.id)

        return booked_car

    async def save_all(self, booked_cars: Sequence[BookedCar]) -> List[BookedCar]:
        """Insert associations in one flush."""
        models = [self._entity_to_model(booked_car) for booked_car in booked_cars]
        self._session.add_all(models)
        await self._session.flush()

        for booked_car, model in zip(booked_cars, models):
            booked_car.assign_id(model.id)
        return list(booked_cars)

    async def find_by_id(self, booked_car_id: int) -> Optional[BookedCar]:
        model = await self._session.get(BookedCarModel, booked_car_id)
        if not model:
            return None
        return self._model_to_entity(model)

    async def find_all(self) -> List[BookedCar]:
        result = await self._session.execute(select(BookedCarModel).order_by(BookedCarModel.id))
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_by_booking_id(self, booking_id: int) -> List[BookedCar]:
        stmt = select(BookedCarModel).where(
            BookedCarModel.booking_id == booking_id
        ).order_by(BookedCarModel.id)
        result = await self._session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def delete(self, booked_car_id: int) -> bool:
        result = await self._session.execute(
            delete(BookedCarModel).where(BookedCarModel.id == booked_car_id)
        )
        return result.rowcount > 0

    def _entity_to_model(self, booked_car: BookedCar) -> BookedCarModel:
        return BookedCarModel(
            id=booked_car.id,
            booking_id=booked_car.booking_id,
            car_id=booked_car.car_id,
            created_at=booked_car.created_at
        )

    def _model_to_entity(self, model: BookedCarModel) -> BookedCar:
        return BookedCar(
            booked_car_id=model.id,
            booking_id=model.booking_id,
            car_id=model.car_id,
            created_at=model.created_at
        )
