"""Password hashing and local access token issuing."""

import time
from typing import Any

import bcrypt
import jwt

from src.core.config import get_settings

LOCAL_TOKEN_ALGORITHM = "HS256"
LOCAL_TOKEN_ISSUER = "freelance-marketplace"


def get_password_hash(password: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Check a plaintext password against a stored bcrypt hash.

    Rows without a hash (provider-only accounts) or with a malformed hash
    never verify.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: dict[str, Any], expires_in: int | None = None) -> tuple[str, int]:
    """Issue a local access token for a users row.

    Args:
        user: The users table row.
        expires_in: Optional lifetime override in seconds.

    Returns:
        tuple: (encoded token, expiry as Unix epoch seconds)
    """
    settings = get_settings()
    now = int(time.time())
    expires_at = now + (expires_in if expires_in is not None else settings.jwt_expiry_seconds)

    payload = {
        "sub": str(user["id"]),
        "email": user.get("email"),
        "role": user.get("role"),
        "iat": now,
        "exp": expires_at,
        "iss": LOCAL_TOKEN_ISSUER,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=LOCAL_TOKEN_ALGORITHM)
    return token, expires_at
