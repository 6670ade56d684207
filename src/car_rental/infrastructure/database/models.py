"""SQLAlchemy database models."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum as SQLEnum, Float, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import declarative_base, relationship

from src.car_rental.domain.entities.car import EngineType
from src.car_rental.domain.entities.user import UserRole

Base = declarative_base()


class UserModel(Base):
    """SQLAlchemy model for users."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(UserRole, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=UserRole.USER
    )

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    bookings = relationship("BookingModel", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email='{self.email}', role='{self.role}')>"


class CarModel(Base):
    """SQLAlchemy model for cars."""

    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, autoincrement=True)

    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    engine_capacity = Column(Float, nullable=False)
    engine_type = Column(
        SQLEnum(EngineType, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False
    )

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    booked_cars = relationship("BookedCarModel", back_populates="car", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<CarModel(id={self.id}, brand='{self.brand}', model='{self.model}')>"


class BookingModel(Base):
    """SQLAlchemy model for bookings."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    checkin_date = Column(Date, nullable=False, index=True)
    checkout_date = Column(Date, nullable=False, index=True)
    price = Column(Numeric(precision=10, scale=2), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserModel", back_populates="bookings")
    booked_cars = relationship("BookedCarModel", back_populates="booking", passive_deletes=True)

    def __repr__(self) -> str:
        return (f"<BookingModel(id={self.id}, user_id={self.user_id}, "
                f"checkin={self.checkin_date}, checkout={self.checkout_date})>")


class BookedCarModel(Base):
    """SQLAlchemy model for the booking/car association."""

    __tablename__ = "booked_cars"

    id = Column(Integer, primary_key=True, autoincrement=True)

    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    booking = relationship("BookingModel", back_populates="booked_cars")
    car = relationship("CarModel", back_populates="booked_cars")

    def __repr__(self) -> str:
        return f"<BookedCarModel(id={self.id}, booking_id={self.booking_id}, car_id={self.car_id})>"
