"""User account management service."""

from typing import List, Optional

from ..ports.repositories import UserRepository
from .access_policy import AccessPolicy
from ...domain.entities.user import User, UserRole
from ...domain.exceptions import AuthorizationError, DuplicateError, NotFoundError, ValidationError
from ...domain.value_objects.auth import Identity, PasswordHasher, validate_email, validate_password
from src.car_rental.infrastructure.logging import get_logger


class UserService:
    """Application service for user registration and profile management."""

    def __init__(self, user_repository: UserRepository):
        self._user_repository = user_repository
        self._logger = get_logger(__name__)

    async def register(self, username: str, email: str, password: str) -> User:
        """Self-registration; new accounts always get the User role."""
        if not username or not username.strip():
            raise ValidationError("Username cannot be empty")
        email = validate_email(email)
        validate_password(password)

        if await self._user_repository.find_by_email(email):
            raise DuplicateError(f"Email already registered: {email}")

        user = User(
            username=username,
            email=email,
            password_hash=PasswordHasher.create_password_hash(password),
            role=UserRole.USER
        )
        user = await self._user_repository.save(user)
        self._logger.info("User registered", extra={"user_id": user.id})
        return user

    async def list_users(self, identity: Identity) -> List[User]:
        AccessPolicy.ensure_admin(identity)
        return await self._user_repository.find_all()

    async def get_user(self, identity: Identity, user_id: int) -> User:
        AccessPolicy.ensure(identity, user_id)
        user = await self._user_repository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def update_user(
        self,
        identity: Identity,
        user_id: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[UserRole] = None
    ) -> User:
        """Update profile fields; only admins may change a role."""
        user = await self.get_user(identity, user_id)

        if role is not None and role != user.role:
            if not identity.is_admin:
                raise AuthorizationError("Only admins can change user roles")
            user.change_role(role)

        if email is not None:
            email = validate_email(email)
            existing = await self._user_repository.find_by_email(email)
            if existing and existing.id != user_id:
                raise DuplicateError(f"Email already registered: {email}")

        if username is not None and not username.strip():
            raise ValidationError("Username cannot be empty")

        user.update_profile(username=username, email=email)

        if password:
            validate_password(password)
            user.change_password_hash(PasswordHasher.create_password_hash(password))

        return await self._user_repository.save(user)

    async def delete_user(self, identity: Identity, user_id: int) -> None:
        """Delete a user together with their bookings."""
        AccessPolicy.ensure(identity, user_id)
        if not await self._user_repository.delete(user_id):
            raise NotFoundError("User", user_id)
        self._logger.info("User deleted", extra={"user_id": user_id})
