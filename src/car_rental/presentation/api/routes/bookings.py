"""Booking endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from src.car_rental.domain.value_objects.auth import Identity
from src.car_rental.domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.services import ServiceFactory
from ..middleware.auth import admin_required, get_current_identity, get_service_factory
from ..schemas.booking_schemas import BookingCreateRequest, BookingResponse, BookingUpdateRequest
from ..schemas.car_schemas import CarResponse

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreateRequest,
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> BookingResponse:
    """Reserve cars for a date range.

    Fails with 400 and the list of ``unavailable_cars`` when any requested
    car is already booked for an overlapping period; nothing is stored in
    that case.
    """
    date_range = DateRange(request.checkin_date, request.checkout_date)

    async with service_factory.get_booking_service() as booking_service:
        booking = await booking_service.create_booking(
            identity, request.user_id, request.cars, date_range
        )
    return BookingResponse.from_entity(booking)


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[BookingResponse]:
    async with service_factory.get_booking_service() as booking_service:
        bookings = await booking_service.list_bookings(identity)
    return [BookingResponse.from_entity(booking) for booking in bookings]


@router.get("/{user_id}/bookings", response_model=List[BookingResponse])
async def get_user_bookings(
    user_id: int = Path(..., description="User ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[BookingResponse]:
    """All bookings of a user, most recent check-in first."""
    async with service_factory.get_booking_service() as booking_service:
        bookings = await booking_service.get_user_bookings(identity, user_id)
    return [BookingResponse.from_entity(booking) for booking in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int = Path(..., description="Booking ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> BookingResponse:
    async with service_factory.get_booking_service() as booking_service:
        booking = await booking_service.get_booking(identity, booking_id)
    return BookingResponse.from_entity(booking)


@router.get("/{booking_id}/cars", response_model=List[CarResponse])
async def get_booking_cars(
    booking_id: int = Path(..., description="Booking ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[CarResponse]:
    async with service_factory.get_booking_service() as booking_service:
        cars = await booking_service.get_booking_cars(identity, booking_id)
    return [CarResponse.from_entity(car) for car in cars]


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    request: BookingUpdateRequest,
    booking_id: int = Path(..., description="Booking ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> BookingResponse:
    """Reschedule a booking; its cars are re-checked for the new dates."""
    date_range = DateRange(request.checkin_date, request.checkout_date)

    async with service_factory.get_booking_service() as booking_service:
        booking = await booking_service.update_booking(
            identity,
            booking_id,
            date_range,
            user_id=request.user_id,
            price=request.price
        )
    return BookingResponse.from_entity(booking)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: int = Path(..., description="Booking ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> None:
    async with service_factory.get_booking_service() as booking_service:
        await booking_service.delete_booking(identity, booking_id)
