"""Authentication business logic service."""

import logging
from typing import Any

from supabase import Client

from src.api.middleware.error_handler import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    NotFoundError,
    SignupError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.permissions import can_self_register
from src.core.security import create_access_token, verify_password
from src.core.supabase import create_auth_client
from src.models.user import Role
from src.schemas.auth import SignupRequest, UserContext
from src.schemas.user import UserCreateRequest
from src.services.user_service import UserService, public_user

logger = logging.getLogger(__name__)

ACCOUNT_SETUP_INCOMPLETE = "Account setup incomplete"
STAFF_SIGNUP_REJECTED = "Staff accounts are created by administrators"


class AuthService:
    """Service for local login, signup hand-off and account resolution."""

    def __init__(self) -> None:
        """Initialize auth service.

        The identity provider client is created on first use with
        create_auth_client(), so local-only flows never build one.
        """
        self.settings = get_settings()
        self.users = UserService()
        self._provider: Client | None = None

    @property
    def provider(self) -> Client:
        """Isolated identity provider client."""
        if self._provider is None:
            self._provider = create_auth_client()
        return self._provider

    def _session_for(self, user: dict[str, Any], message: str) -> dict[str, Any]:
        token, expires_at = create_access_token(user)
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_at": expires_at,
            "user": public_user(user),
            "message": message,
        }

    async def login(self, identifier: str, password: str) -> dict[str, Any]:
        """Log in with local credentials.

        Args:
            identifier: Email address or username.
            password: Plaintext password.

        Returns:
            dict: access_token, token_type, expires_at, user and message.

        Raises:
            AuthenticationError: If the account does not exist or the password is wrong.
            AuthorizationError: If the account is disabled.
        """
        user = await self.users.find_for_login(identifier)

        if not user or not verify_password(password, user.get("password")):
            logger.info("Failed login for %s", identifier)
            raise AuthenticationError("Invalid credentials")

        if not user.get("active", True):
            raise AuthorizationError("Account is disabled")

        await self.users.record_login(user["id"])
        logger.info("User logged in: %s", user["id"])
        return self._session_for(user, "Login successful")

    async def signup(self, data: SignupRequest) -> dict[str, Any]:
        """Create an account through the identity provider and mirror it locally.

        When the local row cannot be created, the provider account is deleted
        again. If that deletion also fails, the error is logged and the
        signup fails with a message saying the accounts are out of sync.

        Args:
            data: Signup request.

        Returns:
            dict: Same shape as login().

        Raises:
            AuthorizationError: If the requested role is a staff role.
            APIError: BadRequestError for taken email/username, ValidationError
                for provider rejections, SignupError for partial failures.
        """
        if not can_self_register(Role(data.role)):
            raise AuthorizationError(STAFF_SIGNUP_REJECTED)

        local_request = UserCreateRequest(
            email=data.email,
            username=data.username,
            full_name=data.full_name,
            role=data.role,
            password=data.password,
        )

        if not self.settings.identity_provider_enabled:
            user = await self.users.create_user(local_request)
            return self._session_for(user, "Signup successful")

        # Fail fast on duplicates before creating anything provider-side.
        if await self.users.get_by_email(data.email):
            raise BadRequestError("Email already in use")
        if await self.users.get_by_username(data.username):
            raise BadRequestError("Username already taken")

        provider_user_id = self._provider_sign_up(data)
        local_request.auth_id = provider_user_id

        try:
            user = await self.users.create_user(local_request)
        except Exception as e:
            logger.error("Local account creation failed for provider user %s: %s", provider_user_id, e)
            self._compensate(provider_user_id, e)
            if isinstance(e, APIError):
                raise
            raise SignupError("Signup failed: could not create account") from e

        logger.info("User signed up: %s (provider %s)", user["id"], provider_user_id)
        return self._session_for(user, "Signup successful")

    def _provider_sign_up(self, data: SignupRequest) -> str:
        try:
            response = self.provider.auth.sign_up(
                {
                    "email": data.email,
                    "password": data.password,
                    "options": {
                        "data": {
                            "username": data.username,
                            "full_name": data.full_name,
                            "role": data.role.value,
                        }
                    },
                }
            )
        except Exception as e:
            error_msg = str(e)
            logger.error("Provider signup failed: %s", error_msg)
            if "already registered" in error_msg.lower() or "already exists" in error_msg.lower():
                raise ValidationError("An account with this email already exists") from e
            if "password" in error_msg.lower():
                raise ValidationError("Password is too weak. Please use a stronger password.") from e
            raise ValidationError(f"Signup failed: {error_msg}") from e

        if not response.user:
            raise ValidationError("Failed to create user account")
        return str(response.user.id)

    def _compensate(self, provider_user_id: str, cause: Exception) -> None:
        """Delete an orphaned provider account.

        Raises:
            SignupError: If the deletion fails; the accounts are then inconsistent.
        """
        try:
            self.provider.auth.admin.delete_user(provider_user_id)
            logger.info("Deleted orphaned provider account %s", provider_user_id)
        except Exception as e:
            logger.error(
                "Compensating deletion failed for provider account %s: %s (original error: %s)",
                provider_user_id,
                e,
                cause,
            )
            raise SignupError(
                "Signup failed and the identity provider account could not be removed. Contact support.",
                compensated=False,
            ) from e

    async def resolve_account(self, user: UserContext) -> dict[str, Any]:
        """Map an authenticated caller to their local users row.

        Local tokens resolve by id. Provider tokens resolve by provider
        account id, then by email; a match by email is linked for next time.

        Raises:
            NotFoundError: If no local row exists ("Account setup incomplete").
            AuthorizationError: If the account is disabled.
        """
        account: dict[str, Any] | None = None

        if user.user_id is not None:
            account = await self.users.get_user(user.user_id)
        elif user.auth_id:
            account = await self.users.get_by_auth_id(user.auth_id)
            if account is None and user.email:
                account = await self.users.get_by_email(user.email)
                if account is not None and not account.get("auth_id"):
                    await self.users.link_auth_id(account["id"], user.auth_id)

        if account is None:
            raise NotFoundError(ACCOUNT_SETUP_INCOMPLETE)
        if not account.get("active", True):
            raise AuthorizationError("Account is disabled")
        return account
