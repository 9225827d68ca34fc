"""JWT authentication middleware and utilities."""

import json
from enum import Enum
from functools import lru_cache
from typing import Any

import jwt
from jwt import PyJWK

from src.core.config import get_settings
from src.core.security import LOCAL_TOKEN_ALGORITHM, LOCAL_TOKEN_ISSUER
from src.schemas.auth import TokenPayload

PROVIDER_TOKEN_ALGORITHM = "ES256"


class AuthErrorCode(str, Enum):
    """Authentication error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """Authentication error with specific error code.

    Raised when JWT validation fails for any reason.
    The error code indicates the specific failure reason.
    """

    def __init__(self, message: str, code: AuthErrorCode) -> None:
        """Initialize authentication error.

        Args:
            message: Human-readable error description.
            code: Specific error code for programmatic handling.
        """
        self.message = message
        self.code = code
        super().__init__(message)


@lru_cache
def get_signing_key() -> Any:
    """Load the identity provider's public key from the signing key JWK.

    Returns:
        Public key for provider JWT verification.
    """
    settings = get_settings()
    jwk_json = settings.supabase_signing_key_jwk

    if not jwk_json:
        raise AuthError(
            "Identity provider signing key not configured",
            AuthErrorCode.INVALID_TOKEN,
        )

    try:
        jwk_data = json.loads(jwk_json)
    except json.JSONDecodeError as e:
        raise AuthError(
            f"Invalid signing key JWK format: {e}",
            AuthErrorCode.INVALID_TOKEN,
        )

    jwk = PyJWK.from_dict(jwk_data)
    return jwk.key


def _verification_key(token: str) -> tuple[Any, str, bool]:
    """Pick the key and algorithm for a token from its unverified header.

    Returns:
        tuple: (key, algorithm, is_local_token)
    """
    header = jwt.get_unverified_header(token)
    algorithm = header.get("alg")

    if algorithm == LOCAL_TOKEN_ALGORITHM:
        return get_settings().jwt_secret, LOCAL_TOKEN_ALGORITHM, True
    if algorithm == PROVIDER_TOKEN_ALGORITHM:
        return get_signing_key(), PROVIDER_TOKEN_ALGORITHM, False

    raise AuthError(f"Unsupported token algorithm: {algorithm}", AuthErrorCode.INVALID_TOKEN)


def decode_jwt(token: str) -> TokenPayload:
    """Decode and validate a JWT token.

    Locally issued tokens are HS256 with the API's secret. Identity provider
    tokens are ES256, verified with the provider's signing key.

    Args:
        token: The JWT token string to decode.

    Returns:
        TokenPayload: Validated token payload.

    Raises:
        AuthError: If token is invalid, expired, or has wrong signature.
    """
    try:
        key, algorithm, is_local = _verification_key(token)

        payload: dict[str, Any] = jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_iat": True,
                "verify_aud": False,
                "require": ["exp", "iat", "sub"],
            },
        )

        return TokenPayload(
            sub=str(payload["sub"]),
            email=payload.get("email"),
            role=payload.get("role"),
            exp=payload["exp"],
            iat=payload["iat"],
            aud=payload.get("aud"),
            iss=payload.get("iss"),
            local=is_local and payload.get("iss") == LOCAL_TOKEN_ISSUER,
        )

    except AuthError:
        raise

    except jwt.ExpiredSignatureError as e:
        raise AuthError(
            "Token has expired",
            AuthErrorCode.TOKEN_EXPIRED,
        ) from e

    except jwt.InvalidSignatureError as e:
        raise AuthError(
            "Invalid token signature",
            AuthErrorCode.INVALID_SIGNATURE,
        ) from e

    except jwt.DecodeError as e:
        raise AuthError(
            f"Invalid token format: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    except jwt.MissingRequiredClaimError as e:
        raise AuthError(
            f"Token missing required claim: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    except Exception as e:
        raise AuthError(
            f"Token validation failed: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e
