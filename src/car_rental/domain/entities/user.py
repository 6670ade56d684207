"""User entity for the car rental system."""

from datetime import datetime
from enum import Enum
from typing import Optional


class UserRole(Enum):
    """User role enumeration."""
    USER = "User"
    ADMIN = "Admin"


class User:
    """User entity representing a registered customer or administrator."""

    def __init__(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
        user_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self._id = user_id
        self._username = username.strip()
        self._email = email.lower().strip()
        self._password_hash = password_hash
        self._role = role
        self._created_at = created_at or datetime.utcnow()
        self._updated_at = updated_at or datetime.utcnow()

    @property
    def id(self) -> Optional[int]:
        """Get user ID (None until persisted)."""
        return self._id

    @property
    def username(self) -> str:
        return self._username

    @property
    def email(self) -> str:
        return self._email

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def role(self) -> UserRole:
        return self._role

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self._role == UserRole.ADMIN

    def assign_id(self, user_id: int) -> None:
        """Set the identifier assigned by the store."""
        self._id = user_id

    def update_profile(self, username: Optional[str] = None, email: Optional[str] = None) -> None:
        """Update username and/or email."""
        if username is not None:
            self._username = username.strip()
        if email is not None:
            self._email = email.lower().strip()
        self._updated_at = datetime.utcnow()

    def change_password_hash(self, password_hash: str) -> None:
        self._password_hash = password_hash
        self._updated_at = datetime.utcnow()

    def change_role(self, role: UserRole) -> None:
        self._role = role
        self._updated_at = datetime.utcnow()

    def __eq__(self, other: object) -> bool:
        """Check equality based on ID."""
        if not isinstance(other, User):
            return False
        return self._id is not None and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email='{self._email}', role='{self._role.value}')"
