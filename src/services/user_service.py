"""User account business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any

from src.api.middleware.error_handler import BadRequestError, NotFoundError
from src.core.security import get_password_hash
from src.core.supabase import get_supabase_client
from src.models.user import Role
from src.schemas.user import UserCreateRequest, UserUpdateRequest

logger = logging.getLogger(__name__)


def public_user(row: dict[str, Any]) -> dict[str, Any]:
    """Drop the password hash from a users row."""
    return {key: value for key, value in row.items() if key != "password"}


class UserService:
    """Service for reading and maintaining local users rows."""

    DEFAULT_LIST_LIMIT = 50

    def __init__(self) -> None:
        """Initialize user service with Supabase client."""
        self.client = get_supabase_client()

    def _get_one(self, column: str, value: Any) -> dict[str, Any] | None:
        response = (
            self.client.table("users")
            .select("*")
            .eq(column, value)
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def get_user(self, user_id: int) -> dict[str, Any] | None:
        """Get a user by local id.

        Returns:
            dict | None: The users row (including password hash) or None.
        """
        return self._get_one("id", user_id)

    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        """Get a user by email address (case-insensitive)."""
        return self._get_one("email", email.strip().lower())

    async def get_by_username(self, username: str) -> dict[str, Any] | None:
        """Get a user by username."""
        return self._get_one("username", username.strip())

    async def get_by_auth_id(self, auth_id: str) -> dict[str, Any] | None:
        """Get the user linked to an identity provider account."""
        return self._get_one("auth_id", auth_id)

    async def find_for_login(self, identifier: str) -> dict[str, Any] | None:
        """Resolve a login identifier, which may be an email or a username."""
        if "@" in identifier:
            return await self.get_by_email(identifier)
        return await self.get_by_username(identifier)

    async def list_users(self, limit: int | None = None) -> list[dict[str, Any]]:
        """List users, oldest first.

        Returns:
            list: Users rows with password hashes removed.
        """
        response = (
            self.client.table("users")
            .select("*")
            .order("id")
            .limit(limit or self.DEFAULT_LIST_LIMIT)
            .execute()
        )
        return [public_user(row) for row in response.data or []]

    async def create_user(self, data: UserCreateRequest) -> dict[str, Any]:
        """Create a local users row.

        Args:
            data: Account fields. The password, if any, is hashed here.

        Returns:
            dict: The created row.

        Raises:
            BadRequestError: If the email or username is already taken.
        """
        email = data.email.strip().lower()
        if await self.get_by_email(email):
            raise BadRequestError("Email already in use")
        if await self.get_by_username(data.username):
            raise BadRequestError("Username already taken")

        row: dict[str, Any] = {
            "email": email,
            "username": data.username.strip(),
            "full_name": data.full_name,
            "role": Role(data.role).value,
            "password": get_password_hash(data.password) if data.password else None,
            "auth_id": data.auth_id,
            "bio": data.bio,
            "skills": data.skills,
            "hourly_rate": data.hourly_rate,
            "location": data.location,
            "wallet_balance": 0,
            "active": True,
        }

        response = self.client.table("users").insert(row).execute()
        created = response.data[0]
        logger.info("Created user %s (%s)", created["id"], created["role"])
        return created

    async def update_user(self, user_id: int, data: UserUpdateRequest) -> dict[str, Any]:
        """Apply a partial profile update.

        Raises:
            NotFoundError: If the user does not exist.
        """
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            existing = await self.get_user(user_id)
            if not existing:
                raise NotFoundError("User not found")
            return existing

        response = self.client.table("users").update(changes).eq("id", user_id).execute()
        if not response.data:
            raise NotFoundError("User not found")
        return response.data[0]

    async def link_auth_id(self, user_id: int, auth_id: str) -> None:
        """Attach an identity provider account id to an existing row."""
        self.client.table("users").update({"auth_id": auth_id}).eq("id", user_id).execute()
        logger.info("Linked user %s to provider account %s", user_id, auth_id)

    async def record_login(self, user_id: int) -> None:
        """Stamp last_login with the current time."""
        now = datetime.now(timezone.utc).isoformat()
        self.client.table("users").update({"last_login": now}).eq("id", user_id).execute()

    async def set_account_fields(self, user_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply administrator changes (role, active, full_name) to an account.

        Raises:
            NotFoundError: If the user does not exist.
        """
        if not changes:
            existing = await self.get_user(user_id)
            if not existing:
                raise NotFoundError("User not found")
            return existing

        response = self.client.table("users").update(changes).eq("id", user_id).execute()
        if not response.data:
            raise NotFoundError("User not found")
        logger.info("Account %s updated by administrator: %s", user_id, sorted(changes))
        return response.data[0]
