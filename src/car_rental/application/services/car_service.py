"""Car catalog management service."""

from typing import List

from ..ports.repositories import CarRepository
from .access_policy import AccessPolicy
from ...domain.entities.car import Car, EngineType
from ...domain.exceptions import NotFoundError
from ...domain.value_objects.auth import Identity
from src.car_rental.infrastructure.logging import get_logger


class CarService:
    """Application service for the rental fleet. Writes are admin-only."""

    def __init__(self, car_repository: CarRepository):
        self._car_repository = car_repository
        self._logger = get_logger(__name__)

    async def create_car(
        self,
        identity: Identity,
        brand: str,
        model: str,
        engine_capacity: float,
        engine_type: EngineType
    ) -> Car:
        AccessPolicy.ensure_admin(identity)
        car = Car(brand, model, engine_capacity, engine_type)
        car = await self._car_repository.save(car)
        self._logger.info("Car created", extra={"car_id": car.id})
        return car

    async def list_cars(self) -> List[Car]:
        return await self._car_repository.find_all()

    async def get_car(self, car_id: int) -> Car:
        car = await self._car_repository.find_by_id(car_id)
        if not car:
            raise NotFoundError("Car", car_id)
        return car

    async def update_car(
        self,
        identity: Identity,
        car_id: int,
        brand: str,
        model: str,
        engine_capacity: float,
        engine_type: EngineType
    ) -> Car:
        AccessPolicy.ensure_admin(identity)
        car = await self.get_car(car_id)
        car.update_details(brand, model, engine_capacity, engine_type)
        return await self._car_repository.save(car)

    async def delete_car(self, identity: Identity, car_id: int) -> None:
        """Delete a car; its booking associations are removed with it."""
        AccessPolicy.ensure_admin(identity)
        if not await self._car_repository.delete(car_id):
            raise NotFoundError("Car", car_id)
        self._logger.info("Car deleted", extra={"car_id": car_id})
