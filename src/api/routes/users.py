"""User account API routes."""

import logging

from fastapi import APIRouter, Query, status

from src.api.deps import CurrentAccount, OptionalAccount, OptionalUser, account_role
from src.api.middleware.error_handler import AuthorizationError, NotFoundError
from src.core.config import get_settings
from src.core.permissions import Capability, can_self_register, has_capability
from src.models.user import Role
from src.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest
from src.services.auth_service import STAFF_SIGNUP_REJECTED
from src.services.user_service import UserService, public_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
    description="List accounts. In production only roles with user-listing access may call it.",
)
async def list_users(
    account: OptionalAccount,
    limit: int = Query(default=50, ge=1, le=200),
) -> list[UserResponse]:
    """List users."""
    settings = get_settings()
    if settings.is_production and (
        account is None or not has_capability(account_role(account), Capability.LIST_USERS)
    ):
        raise AuthorizationError("This endpoint is not available in production")

    service = UserService()
    users = await service.list_users(limit=limit)
    return [UserResponse(**user) for user in users]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create local user record",
    description=(
        "Create a local account. With an identity provider token, the account is "
        "linked to the provider account and must use the token's email."
    ),
)
async def create_user(data: UserCreateRequest, user: OptionalUser) -> UserResponse:
    """Create a local users row.

    Args:
        data: Account fields.
        user: Optional caller; a provider token links the new row.

    Returns:
        UserResponse: The created account.
    """
    if not can_self_register(Role(data.role)):
        raise AuthorizationError(STAFF_SIGNUP_REJECTED)

    # Only a verified provider token may link the row to a provider account.
    data.auth_id = None
    if user is not None and user.auth_id:
        if user.email and user.email.lower() != data.email.strip().lower():
            raise AuthorizationError("Email does not match the authenticated account")
        data.auth_id = user.auth_id

    service = UserService()
    created = await service.create_user(data)
    return UserResponse(**public_user(created))


@router.get("/me", response_model=UserResponse, summary="Get my profile")
async def get_me(account: CurrentAccount) -> UserResponse:
    """Get the caller's account."""
    return UserResponse(**public_user(account))


@router.patch("/me", response_model=UserResponse, summary="Update my profile")
async def update_me(data: UserUpdateRequest, account: CurrentAccount) -> UserResponse:
    """Apply a partial update to the caller's profile."""
    service = UserService()
    updated = await service.update_user(account["id"], data)
    return UserResponse(**public_user(updated))


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(user_id: int) -> UserResponse:
    """Get a user's public profile.

    Raises:
        NotFoundError: If the user does not exist.
    """
    service = UserService()
    user = await service.get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return UserResponse(**public_user(user))
