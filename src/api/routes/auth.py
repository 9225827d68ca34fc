"""Authentication API routes."""

import logging

from fastapi import APIRouter, status

from src.api.deps import CurrentAccount, CurrentUser
from src.schemas.auth import AuthResponse, LoginRequest, LogoutResponse, SignupRequest
from src.schemas.user import UserResponse
from src.services.auth_service import AuthService
from src.services.user_service import public_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in with local credentials",
    description="Authenticate with email (or username) and password. Returns a bearer token.",
    responses={401: {"description": "Invalid credentials"}},
)
async def login(data: LoginRequest) -> AuthResponse:
    """Log in with local credentials.

    Args:
        data: Login request with email or username and password.

    Returns:
        AuthResponse: Access token, expiry and the account.
    """
    service = AuthService()
    result = await service.login(data.identifier, data.password)
    return AuthResponse(**result)


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up new user",
    description=(
        "Create an identity provider account and the matching local account. "
        "If the local account cannot be created, the provider account is removed."
    ),
)
async def signup(data: SignupRequest) -> AuthResponse:
    """Sign up a new user.

    Args:
        data: Signup request.

    Returns:
        AuthResponse: Access token and the new account.
    """
    service = AuthService()
    result = await service.signup(data)
    return AuthResponse(**result)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Log out",
    description="Acknowledge logout. Tokens are stateless; clients discard theirs.",
)
async def logout(user: CurrentUser) -> LogoutResponse:
    """Log out the current user."""
    logger.info("User logged out: %s", user.user_id or user.auth_id)
    return LogoutResponse()


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Return the local account for the bearer token (local or identity provider token).",
    responses={
        401: {"description": "Missing, invalid or expired token"},
        404: {"description": "Token is valid but no local account exists yet"},
    },
)
async def get_current_user_info(account: CurrentAccount) -> UserResponse:
    """Get the caller's account."""
    return UserResponse(**public_user(account))
