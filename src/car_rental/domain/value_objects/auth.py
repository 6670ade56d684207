"""Authentication-related value objects and services."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import hashlib
import re
import secrets

from ..entities.user import UserRole
from ..exceptions import ValidationError


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: str) -> str:
    """Validate and normalize an email address."""
    if not email or not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email format")
    return email.strip().lower()


def validate_password(password: str) -> str:
    """Validate password strength."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Invalid password format. Password should have at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password


@dataclass(frozen=True)
class LoginCredentials:
    """Value object for login credentials."""
    email: str
    password: str

    def __post_init__(self) -> None:
        """Validate credentials."""
        validate_email(self.email)
        validate_password(self.password)

    @property
    def normalized_email(self) -> str:
        return self.email.strip().lower()


@dataclass(frozen=True)
class Identity:
    """Authenticated requester decoded from a bearer credential."""
    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        """Check if requester has the admin role."""
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class AccessToken:
    """Value object for an issued access token."""
    token: str
    user_id: int
    expires_at: datetime
    token_type: str = "bearer"

    @property
    def is_expired(self) -> bool:
        """Check if token is expired."""
        return datetime.utcnow() > self.expires_at


class PasswordHasher:
    """Service for password hashing and verification."""

    ITERATIONS = 100000

    @staticmethod
    def hash_password(password: str, salt: Optional[str] = None) -> tuple[str, str]:
        """Hash a password with salt."""
        if salt is None:
            salt = secrets.token_hex(16)

        # PBKDF2 with SHA-256
        hashed = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            PasswordHasher.ITERATIONS
        )

        return hashed.hex(), salt

    @staticmethod
    def create_password_hash(password: str) -> str:
        """Create a complete password hash with embedded salt."""
        hashed, salt = PasswordHasher.hash_password(password)
        return f"{salt}:{hashed}"

    @staticmethod
    def verify_password_hash(password: str, password_hash: str) -> bool:
        """Verify password against complete hash."""
        try:
            salt, hashed = password_hash.split(':', 1)
        except ValueError:
            return False
        new_hash, _ = PasswordHasher.hash_password(password, salt)
        return secrets.compare_digest(new_hash, hashed)
