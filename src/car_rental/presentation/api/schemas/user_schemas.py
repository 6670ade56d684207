"""Pydantic schemas for users and authentication."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ....domain.entities.user import User
from ....domain.value_objects.auth import AccessToken


class LoginRequest(BaseModel):
    """Login request model."""
    email: str
    password: str


class TokenResponse(BaseModel):
    """Login response model."""
    access_token: str
    token_type: str = "bearer"
    user_id: int
    expires_at: datetime

    @classmethod
    def from_token(cls, token: AccessToken) -> "TokenResponse":
        return cls(
            access_token=token.token,
            token_type=token.token_type,
            user_id=token.user_id,
            expires_at=token.expires_at
        )


class UserCreateRequest(BaseModel):
    """Registration request; new accounts always get the User role."""
    username: str
    email: str
    password: str


class UserUpdateRequest(BaseModel):
    """Partial profile update. ``role`` is honoured for admins only."""
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserResponse(BaseModel):
    """User profile without credentials."""
    id: int
    username: str
    email: str
    role: str
    created_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role.value,
            created_at=user.created_at
        )
