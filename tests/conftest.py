"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from contextlib import ExitStack
from typing import Any
from unittest.mock import patch

import bcrypt
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("SUPABASE_SIGNING_KEY_JWK", "")
os.environ.setdefault("IDENTITY_PROVIDER_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-unit-tests")

from tests.fakes import FakeSupabase  # noqa: E402

TEST_PASSWORD = "password123"

# Modules that bind get_supabase_client at import time
SUPABASE_CONSUMERS = (
    "src.core.supabase",
    "src.services.user_service",
    "src.services.job_service",
    "src.services.proposal_service",
    "src.services.message_service",
    "src.services.ticket_service",
    "src.services.activity_service",
    "src.services.notification_service",
    "src.services.contract_service",
    "src.services.review_service",
)

SEED_USERS = (
    (1, "client@example.com", "democlient", "Demo Client", "client"),
    (2, "freelancer@example.com", "demofreelancer", "Demo Freelancer", "freelancer"),
    (3, "admin@example.com", "siteadmin", "Site Admin", "admin"),
    (4, "support@example.com", "supportagent", "Support Agent", "support"),
    (5, "freelancer2@example.com", "secondfreelancer", "Second Freelancer", "freelancer"),
)


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    # Clear the cache to ensure fresh settings
    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    # Clean up cache after tests
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def password_hash() -> str:
    """bcrypt hash of TEST_PASSWORD, computed once with a low work factor."""
    return bcrypt.hashpw(TEST_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


@pytest.fixture
def fake_db() -> Generator[FakeSupabase, None, None]:
    """Provide an empty in-memory database wired into every service.

    Yields:
        FakeSupabase: The fake client returned by get_supabase_client().
    """
    db = FakeSupabase()
    with ExitStack() as stack:
        for module in SUPABASE_CONSUMERS:
            stack.enter_context(patch(f"{module}.get_supabase_client", return_value=db))
        yield db


@pytest.fixture
def seeded_db(fake_db: FakeSupabase, password_hash: str) -> FakeSupabase:
    """The fake database with one account per common role.

    Ids: 1 client, 2 freelancer, 3 admin, 4 support, 5 second freelancer.
    """
    for user_id, email, username, full_name, role in SEED_USERS:
        fake_db.add(
            "users",
            {
                "id": user_id,
                "auth_id": None,
                "email": email,
                "username": username,
                "password": password_hash,
                "full_name": full_name,
                "role": role,
                "bio": None,
                "avatar": None,
                "skills": None,
                "hourly_rate": None,
                "location": None,
                "wallet_balance": 0,
                "permissions": None,
                "active": True,
                "last_login": None,
            },
        )
    return fake_db


@pytest.fixture
def auth_headers(seeded_db: FakeSupabase) -> Callable[[int], dict[str, str]]:
    """Build Authorization headers carrying a local token for a seeded user."""
    from src.core.security import create_access_token

    def _headers(user_id: int) -> dict[str, str]:
        user = next(row for row in seeded_db.tables["users"] if row["id"] == user_id)
        token, _ = create_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(seeded_db: FakeSupabase) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        seeded_db: Seeded fake database fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client
