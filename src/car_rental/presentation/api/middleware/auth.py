"""
Authentication dependencies for the car rental API.

Routes receive the caller as an ``Identity`` decoded from the bearer token.
Ownership checks happen in the application services; ``admin_required``
only guards routes that are admin-only as a whole.
"""

from fastapi import Depends, Header, Request

from ....application.services.access_policy import AccessPolicy
from ....application.services.auth_service import extract_token
from ....domain.exceptions import AuthenticationError
from ....domain.value_objects.auth import Identity
from ....infrastructure.services import ServiceFactory


def get_service_factory(request: Request) -> ServiceFactory:
    """Return the service factory the application was created with."""
    return request.app.state.service_factory


def get_current_identity(
    authorization: str = Header(None),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> Identity:
    """
    FastAPI dependency resolving the authenticated caller.

    Accepts ``Authorization: Bearer <token>`` or the bare token.

    Raises:
        AuthenticationError: header missing, token invalid or expired
    """
    token = extract_token(authorization)
    if not token:
        raise AuthenticationError("No token provided")
    return service_factory.get_token_service().decode(token)


def admin_required(identity: Identity = Depends(get_current_identity)) -> Identity:
    """
    Dependency for admin-only endpoints.

    Raises:
        AuthorizationError: the caller is not an admin
    """
    AccessPolicy.ensure_admin(identity)
    return identity
