"""Health check endpoints for monitoring and deployment verification."""

import time

from fastapi import APIRouter, Response, status

from src.api.deps import CurrentUser
from src.api.middleware.latency_logging import get_latency_stats
from src.core.config import get_settings
from src.core.supabase import check_database_connection
from src.schemas.auth import AuthenticatedResponse
from src.schemas.common import CheckResult, HealthResponse, HealthStatus, ReadinessResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Basic health check to verify the service is running. Used for liveness checks.",
)
async def health_check() -> HealthResponse:
    """Return basic health status.

    This endpoint should always return 200 if the service is running.
    It does not check external dependencies.

    Returns:
        HealthResponse: Current health status with timestamp.
    """
    return HealthResponse(status=HealthStatus.HEALTHY, service=get_settings().app_name)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "All dependencies healthy"},
        503: {"description": "One or more dependencies unhealthy"},
    },
    summary="Readiness check",
    description="Check if the database is reachable. Used for readiness checks.",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Check readiness of the database.

    Returns 503 if any dependency is unhealthy.

    Args:
        response: FastAPI response object for setting status code.

    Returns:
        ReadinessResponse: Status of all dependency checks.
    """
    checks: list[CheckResult] = []

    start_time = time.perf_counter()
    db_result = await check_database_connection()
    latency_ms = (time.perf_counter() - start_time) * 1000

    checks.append(
        CheckResult(
            name="database",
            healthy=db_result["healthy"],
            latency_ms=round(latency_ms, 2),
            error=db_result.get("error"),
        )
    )

    all_healthy = all(check.healthy for check in checks)
    overall_status = HealthStatus.HEALTHY if all_healthy else HealthStatus.UNHEALTHY

    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(status=overall_status, checks=checks)


@router.get(
    "/health/auth",
    response_model=AuthenticatedResponse,
    summary="Authenticated health check",
    description="Protected endpoint to verify token validation is working.",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"description": "Authentication required or invalid token"},
    },
)
async def authenticated_check(user: CurrentUser) -> AuthenticatedResponse:
    """Return the identity carried by the bearer token.

    Args:
        user: The authenticated user context from JWT.

    Returns:
        AuthenticatedResponse: User information from the token.
    """
    return AuthenticatedResponse(
        authenticated=True,
        user_id=user.user_id,
        auth_id=user.auth_id,
        email=user.email,
        role=user.role,
    )


@router.get(
    "/health/latency",
    summary="Request latency stats",
    description="Aggregated request latencies recorded by the latency logging middleware.",
)
async def latency_check() -> dict:
    """Return overall and per-path latency statistics."""
    return get_latency_stats().summary()
