"""Unit tests for SQLAlchemy models and SQL repository statements."""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from src.car_rental.domain.entities.car import EngineType
from src.car_rental.domain.entities.user import User, UserRole
from src.car_rental.domain.exceptions import DuplicateError
from src.car_rental.domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.database.models import (
    Base,
    BookedCarModel,
    BookingModel,
    CarModel,
    UserModel,
)
from src.car_rental.infrastructure.repositories.sql_repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyCarRepository,
    SQLAlchemyUserRepository,
    booking_overlap_clause,
)


def _sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


class TestModels:
    """Test cases for table definitions."""

    def test_tables_registered(self):
        """Test that all four tables are part of the metadata."""
        assert set(Base.metadata.tables) == {"users", "cars", "bookings", "booked_cars"}

    def test_user_email_is_unique(self):
        """Test the unique constraint on email."""
        assert UserModel.__table__.c.email.unique is True

    def test_enum_columns_store_values(self):
        """Test that enums are persisted by value, e.g. 'Admin' not 'ADMIN'."""
        assert list(UserModel.__table__.c.role.type.enums) == [role.value for role in UserRole]
        assert list(CarModel.__table__.c.engine_type.type.enums) == [kind.value for kind in EngineType]

    def test_booking_price_precision(self):
        """Test that prices are stored as DECIMAL(10, 2)."""
        price_type = BookingModel.__table__.c.price.type

        assert (price_type.precision, price_type.scale) == (10, 2)

    @pytest.mark.parametrize("model,column,target", [
        (BookingModel, "user_id", "users.id"),
        (BookedCarModel, "booking_id", "bookings.id"),
        (BookedCarModel, "car_id", "cars.id"),
    ])
    def test_foreign_keys_cascade(self, model, column, target):
        """Test that dependent rows are removed with their parent."""
        foreign_key = next(iter(model.__table__.c[column].foreign_keys))

        assert foreign_key.target_fullname == target
        assert foreign_key.ondelete == "CASCADE"

    def test_booking_model_creation(self):
        """Test creating a BookingModel with required fields."""
        model = BookingModel(
            user_id=2,
            checkin_date=date(2024, 6, 1),
            checkout_date=date(2024, 6, 5),
            price=Decimal("150.00")
        )

        assert model.user_id == 2
        assert model.price == Decimal("150.00")
        assert model.id is None


class TestSQLStatements:
    """Test cases for the SQL emitted by the repositories."""

    def test_overlap_clause_is_inclusive(self):
        """Test that the predicate uses BETWEEN on both booking dates."""
        sql = _sql(booking_overlap_clause(DateRange(date(2024, 6, 3), date(2024, 6, 10))))

        assert "bookings.checkin_date BETWEEN '2024-06-03' AND '2024-06-10'" in sql
        assert "bookings.checkout_date BETWEEN '2024-06-03' AND '2024-06-10'" in sql
        assert "bookings.checkin_date <= '2024-06-03'" in sql
        assert "bookings.checkout_date >= '2024-06-10'" in sql

    async def test_lock_for_booking_selects_for_update_in_id_order(self):
        """Test that cars are row-locked in a fixed order."""
        session = MagicMock()
        session.execute = AsyncMock()
        repository = SQLAlchemyCarRepository(session)

        async with repository.lock_for_booking([12, 10, 12]):
            pass

        sql = _sql(session.execute.call_args[0][0])
        assert "FOR UPDATE" in sql
        assert "ORDER BY cars.id" in sql
        assert "IN (10, 12)" in sql

    async def test_lock_for_booking_without_cars(self):
        """Test that an empty request takes no locks."""
        session = MagicMock()
        session.execute = AsyncMock()

        async with SQLAlchemyCarRepository(session).lock_for_booking([]):
            pass

        session.execute.assert_not_called()

    async def test_overlap_check_excludes_booking(self):
        """Test that the rescheduled booking is left out of its own check."""
        result = MagicMock()
        result.scalar.return_value = 0
        session = MagicMock()
        session.execute = AsyncMock(return_value=result)
        repository = SQLAlchemyBookingRepository(session)

        conflict = await repository.has_overlapping_booking(
            11, DateRange(date(2024, 6, 3), date(2024, 6, 10)), exclude_booking_id=7
        )

        assert conflict is False
        sql = _sql(session.execute.call_args[0][0])
        assert "booked_cars.car_id = 11" in sql
        assert "bookings.id != 7" in sql

    async def test_lock_booking_selects_for_update(self):
        """Test that the booking row is locked and reloaded."""
        session = MagicMock()
        session.execute = AsyncMock()

        async with SQLAlchemyBookingRepository(session).lock_booking(7):
            pass

        statement = session.execute.call_args[0][0]
        sql = _sql(statement)
        assert "FROM bookings" in sql
        assert "bookings.id = 7" in sql
        assert "FOR UPDATE" in sql
        assert statement.get_execution_options()["populate_existing"] is True


class TestUserRepository:
    """Test cases for SQLAlchemyUserRepository error mapping."""

    async def test_unique_email_violation_is_duplicate_error(self):
        """Test that a lost registration race reports a duplicate, not a database error."""
        session = MagicMock()
        session.flush = AsyncMock(side_effect=IntegrityError(
            "INSERT INTO users", {}, Exception("duplicate key value violates unique constraint")
        ))
        repository = SQLAlchemyUserRepository(session)

        with pytest.raises(DuplicateError, match="carol@example.com"):
            await repository.save(User("carol", "carol@example.com", "hash"))

        session.add.assert_called_once()
