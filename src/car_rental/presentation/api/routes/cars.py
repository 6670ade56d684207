"""Car catalog endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status

from src.car_rental.domain.value_objects.auth import Identity
from src.car_rental.domain.value_objects.date_range import DateRange
from src.car_rental.infrastructure.services import ServiceFactory
from ..middleware.auth import admin_required, get_service_factory
from ..schemas.car_schemas import CarRequest, CarResponse

router = APIRouter()


@router.get("", response_model=List[CarResponse])
async def list_cars(
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[CarResponse]:
    async with service_factory.get_car_service() as car_service:
        cars = await car_service.list_cars()
    return [CarResponse.from_entity(car) for car in cars]


@router.get("/available", response_model=List[CarResponse])
async def list_available_cars(
    checkin_date: str = Query(..., description="Date in YYYY-MM-DD format"),
    checkout_date: str = Query(..., description="Date in YYYY-MM-DD format"),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[CarResponse]:
    """Cars with no booking overlapping the requested period."""
    date_range = DateRange.parse(checkin_date, checkout_date)

    async with service_factory.get_availability_service() as availability_service:
        cars = await availability_service.list_available_cars(date_range)
    return [CarResponse.from_entity(car) for car in cars]


@router.get("/{car_id}", response_model=CarResponse)
async def get_car(
    car_id: int = Path(..., description="Car ID"),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> CarResponse:
    async with service_factory.get_car_service() as car_service:
        car = await car_service.get_car(car_id)
    return CarResponse.from_entity(car)


@router.post("", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
async def create_car(
    request: CarRequest,
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> CarResponse:
    async with service_factory.get_car_service() as car_service:
        car = await car_service.create_car(
            identity,
            request.brand,
            request.model,
            request.engine_capacity,
            request.engine_type
        )
    return CarResponse.from_entity(car)


@router.put("/{car_id}", response_model=CarResponse)
async def update_car(
    request: CarRequest,
    car_id: int = Path(..., description="Car ID"),
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> CarResponse:
    async with service_factory.get_car_service() as car_service:
        car = await car_service.update_car(
            identity,
            car_id,
            request.brand,
            request.model,
            request.engine_capacity,
            request.engine_type
        )
    return CarResponse.from_entity(car)


@router.delete("/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_car(
    car_id: int = Path(..., description="Car ID"),
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> None:
    async with service_factory.get_car_service() as car_service:
        await car_service.delete_car(identity, car_id)
