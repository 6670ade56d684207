"""JWT implementation of the token service."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from src.car_rental.application.ports.tokens import TokenService
from src.car_rental.domain.entities.user import UserRole
from src.car_rental.domain.exceptions import AuthenticationError
from src.car_rental.domain.value_objects.auth import AccessToken, Identity


class JWTTokenService(TokenService):
    """Issues and verifies HS256 JWTs carrying the user ID and role."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def issue(self, identity: Identity) -> AccessToken:
        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=self._expire_minutes)

        to_encode = {
            "sub": str(identity.user_id),
            "role": identity.role.value,
            "exp": expire,
            "iat": now,
            "type": "access_token"
        }
        encoded_jwt = jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

        return AccessToken(
            token=encoded_jwt,
            user_id=identity.user_id,
            expires_at=expire.replace(tzinfo=None)
        )

    def decode(self, token: str) -> Identity:
        try:
            # jose checks "exp" while decoding
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            raise AuthenticationError("Invalid token") from e

        subject = payload.get("sub")
        role = payload.get("role")
        if subject is None or role is None:
            raise AuthenticationError("Invalid token: missing claims")

        try:
            return Identity(user_id=int(subject), role=UserRole(role))
        except ValueError as e:
            raise AuthenticationError("Invalid token: malformed claims") from e
