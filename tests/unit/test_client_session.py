"""Unit tests for the client auth session."""

from pathlib import Path

import httpx
import pytest

from src.client.api_client import MarketplaceClient
from src.client.errors import AccountSetupIncompleteError, InvalidCredentialsError
from src.client.session import AuthSession, FileTokenStore, MemoryTokenStore
from src.core.config import ClientSettings
from src.models.user import Role
from tests.fakes import FakeApi

CLIENT_USER = {"id": 1, "email": "client@example.com", "username": "democlient", "role": "client"}


class FakeProvider:
    """Identity provider returning a fixed token or rejecting every sign-in."""

    def __init__(self, token: str | None = "provider-token") -> None:
        self.token = token
        self.sign_ins: list[str] = []
        self.signed_out = False

    async def sign_in(self, email: str, password: str) -> str:
        self.sign_ins.append(email)
        if self.token is None:
            raise InvalidCredentialsError("Invalid login credentials", 400)
        return self.token

    async def sign_out(self) -> None:
        self.signed_out = True


def login_response(token: str = "local-token") -> dict:
    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_at": 2_000_000_000,
        "user": CLIENT_USER,
        "message": "Login successful",
    }


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def client(api: FakeApi) -> MarketplaceClient:
    return MarketplaceClient(
        "http://testserver",
        settings=ClientSettings(_env_file=None),
        transport=httpx.MockTransport(api),
    )


class TestTokenStores:
    """Tests for the token stores."""

    def test_memory_store(self) -> None:
        store = MemoryTokenStore()
        store.save("abc")
        assert store.load() == "abc"
        store.clear()
        assert store.load() is None

    def test_file_store_round_trip(self, tmp_path: Path) -> None:
        store = FileTokenStore(tmp_path / "nested" / "token")

        assert store.load() is None
        store.save("abc")
        assert store.load() == "abc"
        assert (tmp_path / "nested" / "token").stat().st_mode & 0o777 == 0o600

        store.clear()
        store.clear()
        assert store.load() is None


class TestRestore:
    """Tests for AuthSession.restore."""

    @pytest.mark.asyncio
    async def test_nothing_stored(self, client: MarketplaceClient, api: FakeApi) -> None:
        session = AuthSession(client, MemoryTokenStore())

        assert await session.restore() is None
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_valid_token_restores_user(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("GET", "/api/auth/me", json=CLIENT_USER)
        session = AuthSession(client, MemoryTokenStore("stored-token"))

        user = await session.restore()

        assert user == CLIENT_USER
        assert session.role == Role.CLIENT
        assert client.token == "stored-token"

    @pytest.mark.asyncio
    async def test_rejected_token_is_cleared(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("GET", "/api/auth/me", 401, {"message": "Token has expired"})
        store = MemoryTokenStore("expired-token")
        session = AuthSession(client, store)

        assert await session.restore() is None
        assert store.load() is None
        assert client.token is None


class TestSignIn:
    """Tests for AuthSession.sign_in."""

    @pytest.mark.asyncio
    async def test_local_only_sign_in(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("POST", "/api/auth/login", json=login_response())
        store = MemoryTokenStore()
        session = AuthSession(client, store)

        user = await session.sign_in("client@example.com", "password123")

        assert user["id"] == 1
        assert store.load() == "local-token"
        assert session.is_authenticated

    @pytest.mark.asyncio
    async def test_local_only_rejected(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("POST", "/api/auth/login", 401, {"message": "Invalid credentials"})
        session = AuthSession(client)

        with pytest.raises(InvalidCredentialsError):
            await session.sign_in("client@example.com", "wrong")

        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_provider_sign_in_uses_provider_token(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("GET", "/api/auth/me", json=CLIENT_USER)
        store = MemoryTokenStore()
        session = AuthSession(client, store, FakeProvider())

        user = await session.sign_in("client@example.com", "password123")

        assert user == CLIENT_USER
        assert store.load() == "provider-token"
        assert api.calls("POST", "/api/auth/login") == []

    @pytest.mark.asyncio
    async def test_unknown_provider_account_falls_back_to_local_login(
        self, client: MarketplaceClient, api: FakeApi
    ) -> None:
        api.on("GET", "/api/auth/me", 404, {"message": "Account setup incomplete"})
        api.on("POST", "/api/auth/login", json=login_response())
        store = MemoryTokenStore()
        session = AuthSession(client, store, FakeProvider())

        user = await session.sign_in("client@example.com", "password123")

        assert user["id"] == 1
        assert store.load() == "local-token"
        assert len(api.calls("POST", "/api/auth/login")) == 1

    @pytest.mark.asyncio
    async def test_failed_fallback_reports_incomplete_setup(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("GET", "/api/auth/me", 404, {"message": "Account setup incomplete"})
        api.on("POST", "/api/auth/login", 401, {"message": "Invalid credentials"})
        store = MemoryTokenStore()
        session = AuthSession(client, store, FakeProvider())

        with pytest.raises(AccountSetupIncompleteError):
            await session.sign_in("client@example.com", "password123")

        assert store.load() is None
        assert client.token is None
        assert len(api.calls("POST", "/api/auth/login")) == 1

    @pytest.mark.asyncio
    async def test_provider_rejection(self, client: MarketplaceClient, api: FakeApi) -> None:
        session = AuthSession(client, MemoryTokenStore(), FakeProvider(token=None))

        with pytest.raises(InvalidCredentialsError):
            await session.sign_in("client@example.com", "wrong")

        assert api.requests == []


class TestSignOut:
    """Tests for AuthSession.sign_out."""

    @pytest.mark.asyncio
    async def test_clears_token_user_and_cache(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("POST", "/api/auth/login", json=login_response())
        api.on("POST", "/api/auth/logout", json={"message": "Logged out"})
        api.on("GET", "/api/jobs", json=[{"id": 1}])
        provider = FakeProvider()
        store = MemoryTokenStore()
        session = AuthSession(client, store)
        await session.sign_in("client@example.com", "password123")
        await client.list_jobs()
        session.provider = provider

        await session.sign_out()

        assert store.load() is None
        assert client.token is None
        assert session.user is None
        assert client.cache.peek("/api/jobs") is None
        assert provider.signed_out
        assert len(api.calls("POST", "/api/auth/logout")) == 1

    @pytest.mark.asyncio
    async def test_sign_out_survives_failed_logout_call(self, client: MarketplaceClient, api: FakeApi) -> None:
        api.on("POST", "/api/auth/logout", 401, {"message": "Token has expired"})
        store = MemoryTokenStore("expired")
        client.set_token("expired")
        session = AuthSession(client, store)

        await session.sign_out()

        assert store.load() is None
