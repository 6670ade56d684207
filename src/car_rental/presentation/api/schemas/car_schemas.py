"""Pydantic schemas for the car catalog."""

from datetime import datetime

from pydantic import BaseModel, Field

from ....domain.entities.car import Car


class CarRequest(BaseModel):
    """Request model for creating or replacing a car.

    Range and enum checks live on the Car entity so that API and
    service callers get the same error messages.
    """
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    engine_capacity: float = Field(..., description="Litres, between 0.8 and 8")
    engine_type: str = Field(..., description="Diesel, Petrol or Hybrid")


class CarResponse(BaseModel):
    """Response model for a car."""
    id: int
    brand: str
    model: str
    engine_capacity: float
    engine_type: str
    created_at: datetime

    @classmethod
    def from_entity(cls, car: Car) -> "CarResponse":
        return cls(
            id=car.id,
            brand=car.brand,
            model=car.model,
            engine_capacity=car.engine_capacity,
            engine_type=car.engine_type.value,
            created_at=car.created_at
        )
