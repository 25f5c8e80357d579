"""siwa exceptions.

All exceptions inherit from SiwaError for easy catching.
"""

from __future__ import annotations

from typing import Optional


class SiwaError(Exception):
    """Base exception for siwa errors."""

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(SiwaError):
    """Raised at construction time when a required option is missing."""

    def __init__(self, option: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"AppleStrategy requires a {option} option",
            code="CONFIGURATION_ERROR",
        )
        self.option = option


class SigningError(SiwaError):
    """Raised when the client assertion cannot be signed."""

    def __init__(self, message: str = "Failed to sign client assertion"):
        super().__init__(message=message, code="SIGNING_ERROR")


# ==================== Token Endpoint Errors ====================


class TransportError(SiwaError):
    """Raised by an OAuth2 transport when the token endpoint call fails.

    Carries the HTTP status (None when no response was received) and the raw
    response body so the exchange adapter can classify it.
    """

    def __init__(self, status_code: Optional[int], body: Optional[str]):
        super().__init__(
            message=f"Token endpoint request failed with status {status_code}",
            code="TRANSPORT_ERROR",
        )
        self.status_code = status_code
        self.body = body


class TokenExchangeError(SiwaError):
    """Raised when the provider rejects the authorization code.

    The code attribute holds the provider's error code, e.g. "invalid_grant".
    """

    def __init__(
        self,
        code: str,
        description: Optional[str] = None,
        uri: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message=description or code, code=code)
        self.description = description
        self.uri = uri
        self.status_code = status_code


class InternalOAuthError(SiwaError):
    """Raised when a token endpoint failure carries no usable error code."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message=message, code="INTERNAL_OAUTH_ERROR")
        self.status_code = status_code
        self.body = body


# ==================== Identity Token Errors ====================


class ClaimsError(SiwaError):
    """Raised when the identity token is missing, malformed or incomplete."""

    def __init__(self, message: str = "Invalid identity token"):
        super().__init__(message=message, code="INVALID_CLAIMS")


# ==================== Outcome Errors ====================


class DuplicateOutcomeError(SiwaError):
    """Raised when a second outcome is reported for a single invocation."""

    def __init__(self, message: str = "Outcome already delivered"):
        super().__init__(message=message, code="DUPLICATE_OUTCOME")
