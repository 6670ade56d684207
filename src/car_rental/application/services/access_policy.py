"""Access policy shared by every owner-scoped resource."""

from src.car_rental.domain.exceptions import AuthorizationError
from src.car_rental.domain.value_objects.auth import Identity


class AccessPolicy:
    """Admin-or-owner authorization check."""

    @staticmethod
    def authorize(identity: Identity, resource_owner_id: int) -> bool:
        """Allow admins, or the user owning the resource."""
        return identity.is_admin or identity.user_id == resource_owner_id

    @classmethod
    def ensure(cls, identity: Identity, resource_owner_id: int) -> None:
        """Raise AuthorizationError unless the requester may act on the resource."""
        if not cls.authorize(identity, resource_owner_id):
            raise AuthorizationError("Unauthorized: User is not an admin")

    @staticmethod
    def ensure_admin(identity: Identity) -> None:
        """Raise AuthorizationError unless the requester is an admin."""
        if not identity.is_admin:
            raise AuthorizationError("Unauthorized: User is not an admin")
