"""Errors raised by the marketplace client."""


class ClientError(Exception):
    """Base class for marketplace client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NetworkError(ClientError):
    """The API could not be reached or the connection failed mid-request."""


class ApiError(ClientError):
    """The API answered with an error status not covered by a subclass."""


class AccessDeniedError(ApiError):
    """401 or 403: the caller must sign in again or lacks permission."""


class ResourceNotFoundError(ApiError):
    """404: the requested resource does not exist."""


class InvalidCredentialsError(ClientError):
    """The identity provider or the API rejected the email/password pair."""


class AccountSetupIncompleteError(ClientError):
    """Provider sign-in worked but no local account exists for it."""


class QueryCancelledError(ClientError):
    """A cached read was cancelled because its view was torn down."""
