"""Authentication service: login and bearer credential decoding."""

from typing import Optional, TYPE_CHECKING

from src.car_rental.domain.exceptions import AuthenticationError
from src.car_rental.domain.value_objects.auth import (
    AccessToken,
    Identity,
    LoginCredentials,
    PasswordHasher,
)
from src.car_rental.infrastructure.logging import get_logger, log_authentication_attempt

if TYPE_CHECKING:
    from src.car_rental.application.ports.repositories import UserRepository
    from src.car_rental.application.ports.tokens import TokenService


class AuthenticationService:
    """Service for user authentication."""

    def __init__(
        self,
        user_repository: "UserRepository",
        token_service: "TokenService"
    ):
        self._user_repository = user_repository
        self._token_service = token_service
        self._logger = get_logger(__name__)

    async def login(self, credentials: LoginCredentials) -> AccessToken:
        """Verify email and password and issue an access token."""
        email = credentials.normalized_email
        user = await self._user_repository.find_by_email(email)

        if not user:
            log_authentication_attempt(self._logger, email, False, failure_reason="user_not_found")
            raise AuthenticationError("Invalid email or password")

        if not PasswordHasher.verify_password_hash(credentials.password, user.password_hash):
            log_authentication_attempt(self._logger, email, False,
                                       failure_reason="invalid_password",
                                       user_id=user.id)
            raise AuthenticationError("Invalid email or password")

        token = self._token_service.issue(Identity(user_id=user.id, role=user.role))
        log_authentication_attempt(self._logger, email, True,
                                   user_id=user.id,
                                   token_expires_at=token.expires_at.isoformat())
        return token


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Strip an optional ``Bearer`` scheme from a header value."""
    if not authorization or not authorization.strip():
        return None
    parts = authorization.strip().split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    if len(parts) == 1 and parts[0].lower() != "bearer":
        return parts[0]
    return None
