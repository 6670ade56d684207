"""User account endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status

from src.car_rental.domain.entities.user import UserRole
from src.car_rental.domain.exceptions import ValidationError
from src.car_rental.domain.value_objects.auth import Identity
from src.car_rental.infrastructure.services import ServiceFactory
from ..middleware.auth import admin_required, get_current_identity, get_service_factory
from ..schemas.user_schemas import UserCreateRequest, UserResponse, UserUpdateRequest

router = APIRouter()


def _parse_role(role: Optional[str]) -> Optional[UserRole]:
    if role is None:
        return None
    try:
        return UserRole(role)
    except ValueError as e:
        raise ValidationError("Invalid role") from e


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request: UserCreateRequest,
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> UserResponse:
    """Register a new account with the User role."""
    async with service_factory.get_user_service() as user_service:
        user = await user_service.register(request.username, request.email, request.password)
    return UserResponse.from_entity(user)


@router.get("", response_model=List[UserResponse])
async def list_users(
    identity: Identity = Depends(admin_required),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> List[UserResponse]:
    async with service_factory.get_user_service() as user_service:
        users = await user_service.list_users(identity)
    return [UserResponse.from_entity(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., description="User ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> UserResponse:
    async with service_factory.get_user_service() as user_service:
        user = await user_service.get_user(identity, user_id)
    return UserResponse.from_entity(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    request: UserUpdateRequest,
    user_id: int = Path(..., description="User ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> UserResponse:
    """Update a profile; changing the role requires an admin."""
    role = _parse_role(request.role)

    async with service_factory.get_user_service() as user_service:
        user = await user_service.update_user(
            identity,
            user_id,
            username=request.username,
            email=request.email,
            password=request.password,
            role=role
        )
    return UserResponse.from_entity(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int = Path(..., description="User ID"),
    identity: Identity = Depends(get_current_identity),
    service_factory: ServiceFactory = Depends(get_service_factory)
) -> None:
    """Delete an account together with its bookings."""
    async with service_factory.get_user_service() as user_service:
        await user_service.delete_user(identity, user_id)
