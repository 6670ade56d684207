"""Authentication endpoints."""

from fastapi import APIRouter, Depends

from src.car_rental.domain.value_objects.auth import LoginCredentials
from src.car_rental.infrastructure.services import ServiceFactory
from ..middleware.auth import get_service_factory
from ..schemas.user_schemas import LoginRequest, TokenResponse

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> TokenResponse:
    """Exchange email and password for a bearer token."""
    credentials = LoginCredentials(email=request.email, password=request.password)

    async with service_factory.get_auth_service() as auth_service:
        token = await auth_service.login(credentials)

    return TokenResponse.from_token(token)
