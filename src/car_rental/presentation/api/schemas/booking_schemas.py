"""Pydantic schemas for booking API requests and responses."""

from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

from ....domain.entities.booking import BookedCar, Booking


class BookingCreateRequest(BaseModel):
    """Request model for creating a booking."""
    user_id: int = Field(..., description="ID of the user the booking is made for")
    cars: List[int] = Field(..., min_length=1, description="IDs of the cars to reserve")
    checkin_date: Date = Field(..., description="First day of the rental (YYYY-MM-DD)")
    checkout_date: Date = Field(..., description="Last day of the rental (YYYY-MM-DD)")


class BookingUpdateRequest(BaseModel):
    """Request model for rescheduling a booking."""
    checkin_date: Date
    checkout_date: Date
    user_id: Optional[int] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class BookingResponse(BaseModel):
    """Response model for booking operations."""
    id: int
    user_id: int
    checkin_date: Date
    checkout_date: Date
    price: Decimal
    created_at: datetime
    updated_at: datetime

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            checkin_date=booking.checkin_date,
            checkout_date=booking.checkout_date,
            price=booking.price,
            created_at=booking.created_at,
            updated_at=booking.updated_at
        )


class BookedCarRequest(BaseModel):
    """Request model for linking a car to a booking."""
    booking_id: int
    car_id: int


class BookedCarResponse(BaseModel):
    """Response model for booking/car associations."""
    id: int
    booking_id: int
    car_id: int
    created_at: datetime

    @classmethod
    def from_entity(cls, booked_car: BookedCar) -> "BookedCarResponse":
        return cls(
            id=booked_car.id,
            booking_id=booked_car.booking_id,
            car_id=booked_car.car_id,
            created_at=booked_car.created_at
        )
