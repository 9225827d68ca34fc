"""Global error handling middleware for consistent error responses."""

import logging
import traceback
from typing import Any, Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors.

    Use this class to raise application-specific errors that should
    be returned to the client with a specific status code and message.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code to return.
            error_type: Error category/type for client handling.
            details: Optional additional error details.
        """
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class BadRequestError(APIError):
    """Request is well-formed but not allowed in the current state."""

    def __init__(self, message: str = "Bad request", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="bad_request",
            details=details,
        )


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details=details,
        )


class ValidationError(APIError):
    """Request validation error."""

    def __init__(self, message: str = "Validation error", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_type="validation_error",
            details=details,
        )


class AuthenticationError(APIError):
    """Authentication failure error."""

    def __init__(self, message: str = "Authentication required", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_type="authentication_error",
            details=details,
        )


class AuthorizationError(APIError):
    """Authorization failure error."""

    def __init__(self, message: str = "Access denied", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_type="authorization_error",
            details=details,
        )


class SignupError(APIError):
    """Local account creation failed after the provider account was created."""

    def __init__(
        self,
        message: str = "Signup failed",
        compensated: bool = True,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="signup_failed",
            details=details,
        )
        self.compensated = compensated


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Args:
        error_type: Error category for client handling.
        message: Human-readable error description.
        status_code: HTTP status code.
        details: Optional error details.
        request_id: Optional request ID for tracing.
        headers: Optional response headers.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Middleware to catch and format all exceptions.

    Ensures consistent error response format across the application.
    Logs full stack traces for debugging while returning safe messages to clients.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        response = await call_next(request)
        return response

    except APIError as e:
        logger.warning(
            "API error: %s - %s",
            e.error_type,
            e.message,
            extra={"request_id": request_id, "status_code": e.status_code},
        )
        return create_error_response(
            error_type=e.error_type,
            message=e.message,
            status_code=e.status_code,
            details=e.details,
            request_id=request_id,
        )

    except Exception as e:
        logger.error(
            "Unhandled exception: %s\n%s",
            str(e),
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="internal_error",
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Format APIError raised inside route handlers."""
    logger.warning("API error: %s - %s", exc.error_type, exc.message)
    return create_error_response(
        error_type=exc.error_type,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        request_id=request.headers.get("X-Request-ID"),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Format HTTPException raised by routes and dependencies.

    FastAPI resolves these before they reach the middleware, so they need
    their own handler to share the error body shape.
    """
    logger.warning("HTTP exception: %s - %s", exc.status_code, exc.detail)
    return create_error_response(
        error_type="http_error",
        message=str(exc.detail),
        status_code=exc.status_code,
        request_id=request.headers.get("X-Request-ID"),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Format request body/query validation failures with per-field details."""
    details = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", "Invalid value"),
            "type": error.get("type", "value_error"),
        }
        for error in exc.errors()
    ]
    message = details[0]["msg"] if len(details) == 1 else "Request validation failed"
    return create_error_response(
        error_type="validation_error",
        message=message,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details=details,
        request_id=request.headers.get("X-Request-ID"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
