"""Tests for siwa exceptions."""

from siwa.exceptions import (
    ClaimsError,
    ConfigurationError,
    DuplicateOutcomeError,
    InternalOAuthError,
    SigningError,
    SiwaError,
    TokenExchangeError,
    TransportError,
)


def test_siwa_error():
    """Test base SiwaError."""
    error = SiwaError("Test error", "TEST_CODE")
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.code == "TEST_CODE"


def test_configuration_error_names_option():
    """Test ConfigurationError names the missing option."""
    error = ConfigurationError("team_id")
    assert str(error) == "AppleStrategy requires a team_id option"
    assert error.code == "CONFIGURATION_ERROR"
    assert error.option == "team_id"


def test_configuration_error_custom_message():
    """Test ConfigurationError with a custom message."""
    error = ConfigurationError("verify", "AppleStrategy requires a verify callback")
    assert str(error) == "AppleStrategy requires a verify callback"
    assert error.option == "verify"


def test_signing_error():
    """Test SigningError."""
    error = SigningError()
    assert error.code == "SIGNING_ERROR"
    assert "client assertion" in str(error)


def test_transport_error():
    """Test TransportError keeps status and body."""
    error = TransportError(400, '{"error":"invalid_grant"}')
    assert error.code == "TRANSPORT_ERROR"
    assert error.status_code == 400
    assert error.body == '{"error":"invalid_grant"}'
    assert "400" in str(error)


def test_token_exchange_error_carries_provider_code():
    """Test TokenExchangeError uses the provider's error code."""
    error = TokenExchangeError("invalid_grant", status_code=400)
    assert error.code == "invalid_grant"
    assert error.status_code == 400
    assert error.description is None
    assert str(error) == "invalid_grant"


def test_token_exchange_error_with_description():
    """Test TokenExchangeError with error_description."""
    error = TokenExchangeError("invalid_client", description="Client authentication failed")
    assert error.code == "invalid_client"
    assert str(error) == "Client authentication failed"


def test_internal_oauth_error():
    """Test InternalOAuthError keeps status and body."""
    error = InternalOAuthError("Failed to obtain access token", status_code=502, body="<html>")
    assert error.code == "INTERNAL_OAUTH_ERROR"
    assert error.status_code == 502
    assert error.body == "<html>"


def test_claims_error():
    """Test ClaimsError."""
    error = ClaimsError("Identity token missing subject")
    assert error.code == "INVALID_CLAIMS"
    assert "subject" in str(error)


def test_duplicate_outcome_error():
    """Test DuplicateOutcomeError."""
    assert DuplicateOutcomeError().code == "DUPLICATE_OUTCOME"


def test_all_inherit_from_siwa_error():
    """Test all exceptions inherit from SiwaError."""
    exceptions = [
        ConfigurationError("client_id"),
        SigningError(),
        TransportError(None, None),
        TokenExchangeError("invalid_grant"),
        InternalOAuthError("boom"),
        ClaimsError(),
        DuplicateOutcomeError(),
    ]
    for exc in exceptions:
        assert isinstance(exc, SiwaError), f"{type(exc).__name__} should inherit from SiwaError"
