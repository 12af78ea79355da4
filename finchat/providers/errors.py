"""
Backend error taxonomy.

Every failure talking to a completion or speech backend is reported as one
of the ``ProviderError`` subclasses below. ``message`` is short and safe to
show to an end user; ``detail`` keeps the raw backend body (or transport
exception text) for logs.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Categories of backend failures."""

    CONFIGURATION = "configuration"      # Missing credential
    AUTHENTICATION = "authentication"    # 401
    FORBIDDEN = "forbidden"              # 403, billing/permission
    INVALID_REQUEST = "invalid_request"  # 400
    RATE_LIMIT = "rate_limit"            # 429
    TRANSPORT = "transport"              # No HTTP status obtained
    MALFORMED_RESPONSE = "malformed_response"
    UNCLASSIFIED = "unclassified"


class ProviderError(Exception):
    """Base class for classified backend failures."""

    category: ErrorCategory = ErrorCategory.UNCLASSIFIED
    default_message: str = "The assistant backend failed to respond."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.detail = detail
        self.status_code = status_code
        self.provider = provider
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "category": self.category.value,
            "status_code": self.status_code,
            "provider": self.provider,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code!r}, "
            f"provider={self.provider!r})"
        )


class ConfigurationError(ProviderError):
    """No credential configured for the selected backend. Raised before any network call."""

    category = ErrorCategory.CONFIGURATION
    default_message = "API key not configured."


class AuthenticationError(ProviderError):
    category = ErrorCategory.AUTHENTICATION
    default_message = "The backend rejected the configured API key."


class AccessForbiddenError(ProviderError):
    category = ErrorCategory.FORBIDDEN
    default_message = "Access to the backend is forbidden. Check account billing and usage limits."


class InvalidRequestError(ProviderError):
    category = ErrorCategory.INVALID_REQUEST
    default_message = "The request sent to the backend was invalid."


class RateLimitedError(ProviderError):
    category = ErrorCategory.RATE_LIMIT
    default_message = "Rate limit reached. Please wait a moment and try again."


class TransportError(ProviderError):
    """Connection failure, timeout or reset before any HTTP status was received."""

    category = ErrorCategory.TRANSPORT
    default_message = "Could not reach the backend. Please try again in a moment."


class MalformedResponseError(ProviderError):
    """Success status, but the body lacks the expected shape."""

    category = ErrorCategory.MALFORMED_RESPONSE
    default_message = "The backend returned an unexpected response."


class UnclassifiedBackendError(ProviderError):
    category = ErrorCategory.UNCLASSIFIED
    default_message = "Failed to get a response from the backend."


_STATUS_ERRORS = {
    400: InvalidRequestError,
    401: AuthenticationError,
    403: AccessForbiddenError,
    429: RateLimitedError,
}


def classify_status(status_code: int, body: Optional[str] = None, provider: Optional[str] = None) -> ProviderError:
    """Map a non-success HTTP status to a taxonomy error. The raw body becomes ``detail``."""

    error_cls = _STATUS_ERRORS.get(status_code, UnclassifiedBackendError)
    return error_cls(detail=body, status_code=status_code, provider=provider)


__all__ = [
    "AccessForbiddenError",
    "AuthenticationError",
    "ConfigurationError",
    "ErrorCategory",
    "InvalidRequestError",
    "MalformedResponseError",
    "ProviderError",
    "RateLimitedError",
    "TransportError",
    "UnclassifiedBackendError",
    "classify_status",
]
