"""Authentication schemas for JWT tokens and user context."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.user import Role
from src.schemas.user import UserResponse


class UserContext(BaseModel):
    """Authenticated caller extracted from a validated JWT.

    Local tokens carry the users row id in ``sub``. Identity provider tokens
    carry the provider account id instead, so exactly one of ``user_id`` and
    ``auth_id`` is set.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: int | None = Field(default=None, description="Local users row id (local tokens)")
    auth_id: str | None = Field(default=None, description="Identity provider account id (provider tokens)")
    email: str | None = Field(default=None, description="User's email address if available")
    role: str | None = Field(default=None, description="Role claim carried by the token")


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Covers both locally issued tokens and identity provider tokens.
    """

    model_config = ConfigDict(from_attributes=True)

    sub: str = Field(description="Subject - local user id or provider account id")
    email: str | None = Field(default=None, description="User's email address")
    role: str | None = Field(default=None, description="User's role")
    exp: int = Field(description="Expiration timestamp (Unix epoch)")
    iat: int = Field(description="Issued at timestamp (Unix epoch)")
    aud: str | None = Field(default=None, description="Audience - intended recipient")
    iss: str | None = Field(default=None, description="Issuer - token issuer URL")
    local: bool = Field(default=False, description="Whether the token was issued by this API")

    @property
    def expiration_datetime(self) -> datetime:
        """Get expiration as datetime object."""
        return datetime.fromtimestamp(self.exp)

    def to_user_context(self) -> UserContext:
        """Convert token payload to UserContext.

        Returns:
            UserContext: User context derived from token claims.
        """
        if self.local and self.sub.isdigit():
            return UserContext(user_id=int(self.sub), email=self.email, role=self.role)
        return UserContext(auth_id=self.sub, email=self.email, role=self.role)


class AuthenticatedResponse(BaseModel):
    """Response for authenticated test endpoint."""

    model_config = ConfigDict(from_attributes=True)

    authenticated: bool = Field(default=True, description="Authentication status")
    user_id: int | None = Field(default=None, description="Local user id if the token is local")
    auth_id: str | None = Field(default=None, description="Provider account id if the token is a provider token")
    email: str | None = Field(default=None, description="User email if available")
    role: str | None = Field(default=None, description="User role if available")


class LoginRequest(BaseModel):
    """Request schema for local-credential login.

    Either ``email`` or ``username`` identifies the account.
    """

    model_config = ConfigDict(from_attributes=True)

    email: str | None = Field(default=None, description="Email address (or username)", max_length=255)
    username: str | None = Field(default=None, description="Username", max_length=255)
    password: str = Field(..., min_length=1, description="Account password")

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        """Reject requests that carry neither an email nor a username."""
        if not (self.email or self.username):
            raise ValueError("Email/username and password are required")
        return self

    @property
    def identifier(self) -> str:
        """The login identifier, preferring email."""
        return self.email or self.username or ""


class SignupRequest(BaseModel):
    """Request schema for account signup."""

    model_config = ConfigDict(from_attributes=True)

    email: str = Field(..., description="User's email address", min_length=3, max_length=255)
    password: str = Field(..., description="User's password", min_length=8, max_length=100)
    username: str = Field(..., description="Unique username", min_length=3, max_length=50)
    full_name: str = Field(..., description="Display name", min_length=1, max_length=255)
    role: Role = Field(default=Role.CLIENT, description="Account role (client or freelancer)")


class AuthResponse(BaseModel):
    """Response schema for login and signup."""

    model_config = ConfigDict(from_attributes=True)

    access_token: str = Field(description="Local JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: int = Field(description="Token expiry (Unix epoch seconds)")
    user: UserResponse = Field(description="The authenticated account")
    message: str = Field(default="Login successful", description="Status message")


class LogoutResponse(BaseModel):
    """Response schema for logout."""

    message: str = Field(default="Logged out", description="Status message")
