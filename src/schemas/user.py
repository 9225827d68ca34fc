"""User Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.user import Role


class UserResponse(BaseModel):
    """Public representation of a users row (never includes the password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="User id")
    email: str = Field(description="Email address")
    username: str = Field(description="Username")
    full_name: str = Field(description="Display name")
    role: Role = Field(description="Account role")
    bio: str | None = Field(default=None, description="Profile bio")
    avatar: str | None = Field(default=None, description="Avatar URL")
    skills: list[str] | None = Field(default=None, description="Freelancer skills")
    hourly_rate: float | None = Field(default=None, description="Freelancer hourly rate")
    location: str | None = Field(default=None, description="Location")
    wallet_balance: float = Field(default=0, description="Wallet balance")
    permissions: dict[str, Any] | None = Field(default=None, description="Extra per-user permissions")
    active: bool = Field(default=True, description="Whether the account is active")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")
    last_login: datetime | None = Field(default=None, description="Last login timestamp")


class UserCreateRequest(BaseModel):
    """Schema for creating a local users row."""

    model_config = ConfigDict(from_attributes=True)

    email: str = Field(..., min_length=3, max_length=255, description="Email address")
    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")
    role: Role = Field(default=Role.CLIENT, description="Account role")
    password: str | None = Field(default=None, min_length=8, max_length=100, description="Local password")
    auth_id: str | None = Field(default=None, description="Identity provider account id")
    bio: str | None = Field(default=None, max_length=2000)
    skills: list[str] | None = Field(default=None)
    hourly_rate: float | None = Field(default=None, ge=0)
    location: str | None = Field(default=None, max_length=255)


class UserUpdateRequest(BaseModel):
    """Schema for editing the caller's own profile. All fields optional."""

    model_config = ConfigDict(from_attributes=True)

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    bio: str | None = Field(default=None, max_length=2000)
    avatar: str | None = Field(default=None, max_length=1000)
    skills: list[str] | None = Field(default=None)
    hourly_rate: float | None = Field(default=None, ge=0)
    location: str | None = Field(default=None, max_length=255)


class AdminUserCreateRequest(BaseModel):
    """Schema for an administrator creating an account of any role."""

    email: str = Field(..., min_length=3, max_length=255, description="Email address")
    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    full_name: str = Field(..., min_length=1, max_length=255, description="Display name")
    role: Role = Field(..., description="Account role")
    password: str | None = Field(
        default=None,
        min_length=8,
        max_length=100,
        description="Initial password; one is generated when omitted",
    )


class AdminUserCreatedResponse(BaseModel):
    """Created account plus the generated password, when one was generated."""

    user: UserResponse
    generated_password: str | None = None


class AdminUserUpdateRequest(BaseModel):
    """Schema for an administrator changing an account's role or status."""

    role: Role | None = Field(default=None, description="New role")
    active: bool | None = Field(default=None, description="False disables the account")
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
