"""Health and error response schemas shared by every route."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness check body."""

    model_config = ConfigDict(from_attributes=True)

    status: HealthStatus = Field(description="Current health status")
    service: str = Field(default="freelance-marketplace", description="Service name")
    timestamp: datetime = Field(default_factory=utc_now, description="Check timestamp")
    version: str = Field(default="0.1.0", description="API version")


class CheckResult(BaseModel):
    """Outcome of probing one backing store."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(description="Dependency name")
    healthy: bool = Field(description="Whether the dependency answered")
    latency_ms: float | None = Field(default=None, description="Check round-trip in milliseconds")
    error: str | None = Field(default=None, description="Failure reason when unhealthy")


class ReadinessResponse(BaseModel):
    """Readiness check body: healthy only when every check passed."""

    model_config = ConfigDict(from_attributes=True)

    status: HealthStatus = Field(description="Overall readiness status")
    timestamp: datetime = Field(default_factory=utc_now, description="Check timestamp")
    checks: list[CheckResult] = Field(default_factory=list, description="Individual check results")


class ErrorDetail(BaseModel):
    """One field-level problem inside an error response."""

    model_config = ConfigDict(from_attributes=True)

    loc: list[str] | None = Field(default=None, description="Field path, e.g. ['body', 'email']")
    msg: str = Field(description="Human-readable error message")
    type: str = Field(description="Error type identifier")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response.

    ``error`` is a stable machine-readable category (``not_found``,
    ``authorization_error``...). ``message`` is safe to show to users.
    """

    model_config = ConfigDict(from_attributes=True)

    error: str = Field(description="Error category")
    message: str = Field(description="Human-readable error description")
    details: list[ErrorDetail] | None = Field(default=None, description="Per-field details")
    request_id: str | None = Field(default=None, description="Echo of the X-Request-ID header")
    timestamp: datetime = Field(default_factory=utc_now, description="Error timestamp")

    @classmethod
    def from_exception(
        cls,
        error_type: str,
        message: str,
        details: list[dict[str, Any]] | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Build the body from an error category, message and raw details."""
        error_details = None
        if details:
            error_details = [
                ErrorDetail(
                    loc=[str(part) for part in d["loc"]] if d.get("loc") else None,
                    msg=d.get("msg", str(d)),
                    type=d.get("type", "error"),
                )
                for d in details
            ]

        return cls(
            error=error_type,
            message=message,
            details=error_details,
            request_id=request_id,
        )
