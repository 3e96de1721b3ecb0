"""
Exception hierarchy for the Google Business Profile review bridge.

Every error raised inside the bridge derives from ``APIClientError`` and
carries a stable ``error_code`` tag. The public service layer catches these
and turns them into failed ``ServiceResult`` values, so callers of the MCP
tools never see a raised exception.

Usage:
    from src.exceptions import (
        APIClientError,
        NotAuthenticatedError,
        ApiRequestError,
    )

    try:
        await executor.get("accounts/1/locations/2/reviews")
    except NotAuthenticatedError:
        # No token set yet - the user must complete the OAuth flow
        ...
    except ApiRequestError as e:
        logger.warning(f"Upstream returned HTTP {e.status_code}")
"""

from typing import Any


class APIClientError(Exception):
    """Base exception for all bridge errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional error context.
        status_code: HTTP status code if applicable.
        service: Name of the service that raised the error.
        error_code: Stable tag copied into failed service results.
    """

    error_code = "API_REQUEST_FAILED"

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        self.service = service

    def __str__(self) -> str:
        parts = [self.message]
        if self.service:
            parts.insert(0, f"[{self.service}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)


# =============================================================================
# Authentication
# =============================================================================


class AuthenticationError(APIClientError):
    """OAuth token lifecycle failure."""

    error_code = "AUTHENTICATION_REQUIRED"


class NotAuthenticatedError(AuthenticationError):
    """No token set exists; the OAuth flow has not been completed."""

    error_code = "NOT_AUTHENTICATED"

    def __init__(self, message: str = "Not authenticated with Google", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class NoRefreshTokenError(AuthenticationError):
    """The access token expired and there is no refresh token to renew it."""

    error_code = "NO_REFRESH_TOKEN"

    def __init__(self, message: str = "No refresh token available", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class RefreshFailedError(AuthenticationError):
    """The refresh-token exchange failed."""

    error_code = "REFRESH_FAILED"

    def __init__(self, message: str = "Failed to refresh access token", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ExchangeFailedError(AuthenticationError):
    """The authorization-code exchange failed."""

    error_code = "EXCHANGE_FAILED"

    def __init__(
        self,
        message: str = "Failed to exchange authorization code for tokens",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


# =============================================================================
# Location resolution
# =============================================================================


class ResolutionError(APIClientError):
    """A location reference could not be turned into a full resource path."""

    error_code = "INVALID_LOCATION"


class NoAccountsFoundError(ResolutionError):
    """The authenticated user has no Business Profile accounts."""

    error_code = "NO_ACCOUNTS_FOUND"

    def __init__(
        self,
        message: str = (
            "No business accounts found. Please ensure your Google account "
            "has a Google Business Profile."
        ),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


# =============================================================================
# Upstream API
# =============================================================================


class ApiRequestError(APIClientError):
    """Upstream returned a non-2xx response.

    Attributes:
        body: Raw response body text, kept verbatim.
    """

    error_code = "API_REQUEST_FAILED"

    def __init__(self, status_code: int, body: str, **kwargs: Any) -> None:
        super().__init__(
            f"API request failed: {status_code} - {body}",
            status_code=status_code,
            **kwargs,
        )
        self.body = body

    def __str__(self) -> str:
        return self.message


class ApiTransportError(APIClientError):
    """Upstream could not be reached, or answered with an unreadable body."""

    error_code = "API_REQUEST_FAILED"


class PaginationExhaustedError(APIClientError):
    """Upstream kept issuing cursors beyond the configured page cap.

    Attributes:
        max_pages: The page cap that was reached.
    """

    error_code = "PAGINATION_EXHAUSTED"

    def __init__(
        self,
        message: str = "Pagination did not terminate",
        *,
        max_pages: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.max_pages = max_pages


class ValidationError(APIClientError):
    """Input validation failed before any network call.

    Attributes:
        field: Name of the field that failed validation.
        value: The invalid value (truncated).
    """

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, status_code=400, **kwargs)
        self.field = field
        self.value = str(value)[:100] if value is not None else None


class ConfigurationError(APIClientError):
    """Required configuration is missing or malformed."""

    error_code = "CONFIGURATION_ERROR"


__all__ = [
    "APIClientError",
    "AuthenticationError",
    "NotAuthenticatedError",
    "NoRefreshTokenError",
    "RefreshFailedError",
    "ExchangeFailedError",
    "ResolutionError",
    "NoAccountsFoundError",
    "ApiRequestError",
    "ApiTransportError",
    "PaginationExhaustedError",
    "ValidationError",
    "ConfigurationError",
]
