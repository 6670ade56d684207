"""Admin endpoints for booking/car associations."""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from src.car_rental.domain.value_objects.auth import Identity
from src.car_rental.infrastructure.services import ServiceFactory
from ..middleware.auth import admin_required, get_service_factory
from ..schemas.booking_schemas import BookedCarRequest, BookedCarResponse

router = APIRouter()


@router.post("", response_model=BookedCarResponse, status_code=status.HTTP_201_CREATED)
async def create_booked_car(
    request: BookedCarRequest,
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> BookedCarResponse:
    async with service_factory.get_booked_car_service() as booked_car_service:
        booked_car = await booked_car_service.create(identity, request.booking_id, request.car_id)
    return BookedCarResponse.from_entity(booked_car)


@router.get("", response_model=List[BookedCarResponse])
async def list_booked_cars(
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[BookedCarResponse]:
    async with service_factory.get_booked_car_service() as booked_car_service:
        booked_cars = await booked_car_service.list_all(identity)
    return [BookedCarResponse.from_entity(booked_car) for booked_car in booked_cars]


@router.get("/{booked_car_id}", response_model=BookedCarResponse)
async def get_booked_car(
    booked_car_id: int = Path(..., description="Booked car ID"),
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> BookedCarResponse:
    async with service_factory.get_booked_car_service() as booked_car_service:
        booked_car = await booked_car_service.get(identity, booked_car_id)
    return BookedCarResponse.from_entity(booked_car)


@router.put("/{booked_car_id}", response_model=BookedCarResponse)
async def update_booked_car(
    request: BookedCarRequest,
    booked_car_id: int = Path(..., description="Booked car ID"),
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> BookedCarResponse:
    async with service_factory.get_booked_car_service() as booked_car_service:
        booked_car = await booked_car_service.update(
            identity, booked_car_id, request.booking_id, request.car_id
        )
    return BookedCarResponse.from_entity(booked_car)


@router.delete("/{booked_car_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booked_car(
    booked_car_id: int = Path(..., description="Booked car ID"),
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> None:
    async with service_factory.get_booked_car_service() as booked_car_service:
        await booked_car_service.delete(identity, booked_car_id)
