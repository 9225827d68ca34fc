"""Supabase client singleton for database operations."""

from functools import lru_cache
from typing import Any

from supabase import Client, create_client
from supabase.lib.client_options import SyncClientOptions
from supabase_auth import SyncMemoryStorage

from src.core.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get cached Supabase client singleton for database operations.

    Uses the secret key, which bypasses RLS at the PostgREST level. Only use
    it after the route has authorized the caller.

    Do NOT call sign-in methods on this client; use create_auth_client()
    so the singleton's Authorization header stays the secret key.

    Returns:
        Client: Supabase client instance.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
    )


def create_auth_client() -> Client:
    """Create a fresh Supabase client for identity provider operations.

    Signup and the compensating admin deletion run on an isolated client with
    in-memory session storage, so no session leaks between requests.

    Returns:
        Client: Fresh Supabase client instance with isolated session storage.
    """
    settings = get_settings()
    options = SyncClientOptions(
        storage=SyncMemoryStorage(),
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
        options=options,
    )


async def check_database_connection() -> dict[str, Any]:
    """Check if database connection is healthy.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    try:
        client = get_supabase_client()
        client.table("users").select("id").limit(1).execute()
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}
