"""Port interface for access token issuing and decoding."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.car_rental.domain.value_objects.auth import AccessToken, Identity


class TokenService(ABC):
    """Port interface for the bearer token service."""

    @abstractmethod
    def issue(self, identity: "Identity") -> "AccessToken":
        """Issue a signed access token for an identity."""
        raise NotImplementedError

    @abstractmethod
    def decode(self, token: str) -> "Identity":
        """Decode a token; raises AuthenticationError if invalid or expired."""
        raise NotImplementedError
