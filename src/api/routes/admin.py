"""Administrator account management routes."""

import logging
import secrets

from fastapi import APIRouter, status

from src.api.deps import AdminAccount
from src.api.middleware.error_handler import BadRequestError
from src.schemas.user import (
    AdminUserCreatedResponse,
    AdminUserCreateRequest,
    AdminUserUpdateRequest,
    UserCreateRequest,
    UserResponse,
)
from src.services.user_service import UserService, public_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/users",
    response_model=AdminUserCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account of any role",
    description="Staff accounts are created here. A password is generated when none is given.",
)
async def create_account(data: AdminUserCreateRequest, admin: AdminAccount) -> AdminUserCreatedResponse:
    """Create an account as an administrator."""
    generated = None if data.password else secrets.token_urlsafe(12)
    request = UserCreateRequest(
        email=data.email,
        username=data.username,
        full_name=data.full_name,
        role=data.role,
        password=data.password or generated,
    )

    service = UserService()
    created = await service.create_user(request)
    logger.info("Administrator %s created %s account %s", admin["id"], created["role"], created["id"])
    return AdminUserCreatedResponse(user=UserResponse(**public_user(created)), generated_password=generated)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Change an account's role or status",
    description="Accounts are never deleted; set active to false to disable one.",
)
async def update_account(user_id: int, data: AdminUserUpdateRequest, admin: AdminAccount) -> UserResponse:
    """Update another account's role, active flag or name."""
    changes = data.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if user_id == admin["id"] and ("role" in changes or changes.get("active") is False):
        raise BadRequestError("Administrators cannot demote or disable their own account")

    service = UserService()
    updated = await service.set_account_fields(user_id, changes)
    return UserResponse(**public_user(updated))
