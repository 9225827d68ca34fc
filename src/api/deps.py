"""FastAPI dependency injection functions."""

from typing import Annotated, Any, Callable, Coroutine

from fastapi import Depends, Header, HTTPException, status

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.api.middleware.error_handler import AuthorizationError
from src.core.permissions import Capability, has_capability
from src.models.user import Role
from src.schemas.auth import UserContext
from src.services.auth_service import AuthService


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    Accepts both locally issued tokens and identity provider tokens.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = parts[1]

    try:
        payload = decode_jwt(token)
        return payload.to_user_context()

    except AuthError as e:
        if e.code == AuthErrorCode.TOKEN_EXPIRED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_optional_user(
    authorization: Annotated[str | None, Header()] = None,
) -> UserContext | None:
    """Extract the current user if an Authorization header is present.

    Returns None without a header; an invalid token still raises 401.
    """
    if not authorization:
        return None
    return await get_current_user(authorization)


CurrentUser = Annotated[UserContext, Depends(get_current_user)]
OptionalUser = Annotated[UserContext | None, Depends(get_optional_user)]


async def get_current_account(user: CurrentUser) -> dict[str, Any]:
    """Load the caller's local users row.

    Raises:
        NotFoundError: 404 "Account setup incomplete" when a valid provider
            token has no local row yet.
    """
    return await AuthService().resolve_account(user)


async def get_optional_account(user: OptionalUser) -> dict[str, Any] | None:
    """Load the caller's users row when a token is present."""
    if user is None:
        return None
    return await AuthService().resolve_account(user)


CurrentAccount = Annotated[dict[str, Any], Depends(get_current_account)]
OptionalAccount = Annotated[dict[str, Any] | None, Depends(get_optional_account)]


def account_role(account: dict[str, Any]) -> Role:
    """The Role of a users row."""
    return Role(account["role"])


def require_capability(
    capability: Capability,
    message: str | None = None,
) -> Callable[[dict[str, Any]], Coroutine[Any, Any, dict[str, Any]]]:
    """Build a dependency that admits only accounts whose role grants ``capability``.

    Args:
        capability: The capability to require.
        message: Optional 403 message.

    Returns:
        Dependency returning the caller's users row.
    """

    async def dependency(account: CurrentAccount) -> dict[str, Any]:
        if not has_capability(account_role(account), capability):
            raise AuthorizationError(message or f"Your role cannot {capability.value.replace('_', ' ')}")
        return account

    return dependency


ClientAccount = Annotated[
    dict[str, Any],
    Depends(require_capability(Capability.POST_JOBS, "Only clients can post jobs")),
]
ReviewerAccount = Annotated[
    dict[str, Any],
    Depends(require_capability(Capability.REVIEW_PROPOSALS, "Only clients can review proposals")),
]
FreelancerAccount = Annotated[
    dict[str, Any],
    Depends(require_capability(Capability.SUBMIT_PROPOSALS, "Only freelancers can submit proposals")),
]
MessagingAccount = Annotated[dict[str, Any], Depends(require_capability(Capability.SEND_MESSAGES))]
HiringAccount = Annotated[
    dict[str, Any],
    Depends(require_capability(Capability.HIRE_FREELANCERS, "Only clients can hire freelancers")),
]
TicketHandlerAccount = Annotated[
    dict[str, Any],
    Depends(require_capability(Capability.HANDLE_TICKETS, "Only support staff can update tickets")),
]
AdminAccount = Annotated[
    dict[str, Any],
    Depends(require_capability(Capability.MANAGE_USERS, "Only administrators can manage accounts")),
]
