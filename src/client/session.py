"""Client-side session: sign-in hand-off, token persistence and sign-out.

Sign-in tries the identity provider first and then asks the API who the
provider account belongs to. If the API does not recognise the provider
token, one local-credential login is attempted before giving up.
"""

import logging
import os
from pathlib import Path
from typing import Protocol

from supabase import AsyncClient, acreate_client
from supabase_auth.errors import AuthApiError

from src.client.api_client import MarketplaceClient
from src.client.errors import (
    AccessDeniedError,
    AccountSetupIncompleteError,
    InvalidCredentialsError,
    NetworkError,
    ResourceNotFoundError,
)
from src.core.config import ClientSettings, get_client_settings
from src.models.user import Role

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Where the session token lives between runs."""

    def load(self) -> str | None: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


class FileTokenStore:
    """Token persisted to a single user-readable file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or get_client_settings().token_file).expanduser()

    def load(self) -> str | None:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class MemoryTokenStore:
    """Token kept only for the life of the process."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class IdentityProvider(Protocol):
    """Exchanges credentials for a provider access token."""

    async def sign_in(self, email: str, password: str) -> str: ...

    async def sign_out(self) -> None: ...


class SupabaseIdentityProvider:
    """Identity provider backed by Supabase Auth password sign-in."""

    def __init__(self, settings: ClientSettings | None = None) -> None:
        self.settings = settings or get_client_settings()
        self._client: AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self.settings.supabase_url and self.settings.supabase_publishable_key)

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(self.settings.supabase_url, self.settings.supabase_publishable_key)
        return self._client

    async def sign_in(self, email: str, password: str) -> str:
        """Sign in with email and password.

        Raises:
            InvalidCredentialsError: The provider rejected the credentials.
        """
        client = await self._get_client()
        try:
            response = await client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthApiError as e:
            raise InvalidCredentialsError(e.message or "Invalid credentials", e.status) from e

        if response.session is None:
            raise InvalidCredentialsError("Sign-in did not return a session")
        return response.session.access_token

    async def sign_out(self) -> None:
        if self._client is not None:
            await self._client.auth.sign_out()


class AuthSession:
    """The signed-in user for one client.

    Example:
        session = AuthSession(client, FileTokenStore(), SupabaseIdentityProvider())
        user = await session.restore() or await session.sign_in(email, password)
    """

    def __init__(
        self,
        client: MarketplaceClient,
        store: TokenStore | None = None,
        provider: IdentityProvider | None = None,
    ) -> None:
        self.client = client
        self.store = store or MemoryTokenStore()
        self.provider = provider
        self.user: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> int | None:
        return self.user["id"] if self.user else None

    @property
    def role(self) -> Role | None:
        return Role(self.user["role"]) if self.user else None

    async def restore(self) -> dict | None:
        """Resume a persisted session if its token is still accepted.

        Returns:
            dict | None: The account, or None when there is nothing to resume.
        """
        token = self.store.load()
        if not token:
            return None

        self.client.set_token(token)
        try:
            self.user = await self.client.get_me()
        except (AccessDeniedError, ResourceNotFoundError):
            logger.info("Stored session is no longer valid, clearing it")
            self.store.clear()
            self.client.set_token(None)
            self.user = None
        except NetworkError as e:
            # Token kept so a later restore can retry.
            logger.warning("Could not restore session: %s", e)
            self.client.set_token(None)
            self.user = None
        return self.user

    async def sign_in(self, email: str, password: str) -> dict:
        """Sign in and load the caller's account.

        Raises:
            InvalidCredentialsError: The credentials were rejected.
            AccountSetupIncompleteError: The provider accepted the credentials
                but the API has no matching account.
        """
        if self.provider is None:
            return await self._local_login(email, password)

        provider_token = await self.provider.sign_in(email, password)
        self.client.set_token(provider_token)
        try:
            user = await self.client.get_me()
        except (AccessDeniedError, ResourceNotFoundError) as e:
            logger.warning("Provider account %s not recognised (%s), trying local login", email, e.message)
            self.client.set_token(None)
            try:
                return await self._local_login(email, password)
            except InvalidCredentialsError as login_error:
                raise AccountSetupIncompleteError(
                    "Your account setup is incomplete. Please contact support.",
                    e.status_code,
                ) from login_error

        self._adopt(provider_token, user)
        return user

    async def _local_login(self, email: str, password: str) -> dict:
        try:
            result = await self.client.login(email, password)
        except AccessDeniedError as e:
            self.client.set_token(None)
            raise InvalidCredentialsError(e.message, e.status_code) from e
        self._adopt(result["access_token"], result["user"])
        return result["user"]

    async def sign_up(
        self,
        email: str,
        password: str,
        username: str,
        full_name: str,
        role: Role = Role.CLIENT,
    ) -> dict:
        """Create an account and sign in as it."""
        result = await self.client.signup(email, password, username, full_name, role.value)
        self._adopt(result["access_token"], result["user"])
        return result["user"]

    def _adopt(self, token: str, user: dict) -> None:
        self.client.set_token(token)
        self.store.save(token)
        self.user = user
        logger.info("Signed in as user %s (%s)", user.get("id"), user.get("role"))

    async def sign_out(self) -> None:
        """Forget the token, the account and every cached read."""
        if self.client.token:
            try:
                await self.client.logout()
            except (AccessDeniedError, NetworkError) as e:
                logger.warning("Logout request failed: %s", e)
        if self.provider is not None:
            await self.provider.sign_out()

        self.store.clear()
        self.client.set_token(None)
        self.client.cache.clear()
        self.user = None
