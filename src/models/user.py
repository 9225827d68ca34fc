"""User model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import Any, TypedDict


class Role(str, Enum):
    """Account roles matching the users.role column.

    The set is closed: every role-dependent decision goes through
    src.core.permissions, which matches exhaustively on this enum.
    """

    CLIENT = "client"
    FREELANCER = "freelancer"
    ADMIN = "admin"
    SUPPORT = "support"
    QA = "qa"
    DISPUTE_RESOLUTION = "dispute_resolution"
    ACCOUNTS = "accounts"


class User(TypedDict):
    """Users table row representation.

    ``password`` holds a bcrypt hash and never leaves the service layer.
    ``auth_id`` links the row to an identity provider account.
    """

    id: int
    auth_id: str | None
    email: str
    username: str
    password: str | None
    full_name: str
    role: Role
    bio: str | None
    avatar: str | None
    skills: list[str] | None
    hourly_rate: float | None
    location: str | None
    wallet_balance: float
    permissions: dict[str, Any] | None
    active: bool
    created_at: datetime
    last_login: datetime | None


class UserCreate(TypedDict, total=False):
    """Data required to create a new users row."""

    auth_id: str | None
    email: str
    username: str
    password: str | None
    full_name: str
    role: Role
    bio: str | None
    skills: list[str] | None
    hourly_rate: float | None
    location: str | None


class UserUpdate(TypedDict, total=False):
    """Profile fields a user may change on their own row."""

    full_name: str
    bio: str | None
    avatar: str | None
    skills: list[str] | None
    hourly_rate: float | None
    location: str | None
