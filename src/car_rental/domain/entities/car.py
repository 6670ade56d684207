"""Car entity for the rental fleet."""

from datetime import datetime
from enum import Enum
from typing import Optional

from ..exceptions import ValidationError


class EngineType(Enum):
    """Engine type enumeration."""
    DIESEL = "Diesel"
    PETROL = "Petrol"
    HYBRID = "Hybrid"


MIN_ENGINE_CAPACITY = 0.8
MAX_ENGINE_CAPACITY = 8.0


def validate_engine_capacity(engine_capacity: float) -> float:
    """Validate engine capacity is within the allowed litre range."""
    try:
        value = float(engine_capacity)
    except (TypeError, ValueError) as e:
        raise ValidationError("Invalid engine capacity") from e
    if value < MIN_ENGINE_CAPACITY or value > MAX_ENGINE_CAPACITY:
        raise ValidationError("Invalid engine capacity")
    return value


def parse_engine_type(engine_type) -> EngineType:
    """Convert a raw value into an EngineType."""
    if isinstance(engine_type, EngineType):
        return engine_type
    try:
        return EngineType(engine_type)
    except ValueError as e:
        raise ValidationError("Invalid engine type") from e


class Car:
    """Car entity available for rental."""

    def __init__(
        self,
        brand: str,
        model: str,
        engine_capacity: float,
        engine_type: EngineType,
        car_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        if not brand or not brand.strip():
            raise ValidationError("Brand cannot be empty")
        if not model or not model.strip():
            raise ValidationError("Model cannot be empty")

        self._id = car_id
        self._brand = brand.strip()
        self._model = model.strip()
        self._engine_capacity = validate_engine_capacity(engine_capacity)
        self._engine_type = parse_engine_type(engine_type)
        self._created_at = created_at or datetime.utcnow()
        self._updated_at = updated_at or datetime.utcnow()

    @property
    def id(self) -> Optional[int]:
        """Get car ID (None until persisted)."""
        return self._id

    @property
    def brand(self) -> str:
        return self._brand

    @property
    def model(self) -> str:
        return self._model

    @property
    def engine_capacity(self) -> float:
        return self._engine_capacity

    @property
    def engine_type(self) -> EngineType:
        return self._engine_type

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def assign_id(self, car_id: int) -> None:
        self._id = car_id

    def update_details(
        self,
        brand: str,
        model: str,
        engine_capacity: float,
        engine_type: EngineType
    ) -> None:
        """Replace car details, re-validating engine fields."""
        if not brand or not brand.strip() or not model or not model.strip():
            raise ValidationError("Brand and model cannot be empty")
        capacity = validate_engine_capacity(engine_capacity)
        kind = parse_engine_type(engine_type)

        self._brand = brand.strip()
        self._model = model.strip()
        self._engine_capacity = capacity
        self._engine_type = kind
        self._updated_at = datetime.utcnow()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Car):
            return False
        return self._id is not None and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"Car({self._id}, {self._brand} {self._model}, {self._engine_type.value})"
