"""Domain error taxonomy for the car rental system."""

from typing import Iterable, List


class CarRentalError(Exception):
    """Base class for errors raised by the car rental core."""
    pass


class ValidationError(CarRentalError, ValueError):
    """Raised when input data breaks a domain rule (dates, engine fields, credentials)."""
    pass


class AuthenticationError(CarRentalError):
    """Raised when a credential is missing, malformed or invalid."""
    pass


class AuthorizationError(CarRentalError):
    """Raised when an authenticated requester is not entitled to the resource."""
    pass


class NotFoundError(CarRentalError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class ConflictError(CarRentalError):
    """Raised when one or more cars are already booked for an overlapping range."""

    def __init__(self, unavailable_car_ids: Iterable[int], message: str = None):
        self.unavailable_car_ids: List[int] = list(unavailable_car_ids)
        super().__init__(
            message or "Some cars are already booked for the specified date range"
        )


class DuplicateError(CarRentalError):
    """Raised when a unique attribute (e.g. user email) is already taken."""
    pass


class InternalError(CarRentalError, RuntimeError):
    """Raised on store failures or unexpected states."""
    pass
