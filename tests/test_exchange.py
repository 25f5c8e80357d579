"""Tests for the token exchange adapter."""

import pytest

from siwa.exceptions import InternalOAuthError, TokenExchangeError, TransportError
from siwa.exchange import TokenExchangeAdapter, parse_error_response
from siwa.mock import MockTransport
from siwa.models import StrategyConfig, TokenResponse


@pytest.mark.asyncio
async def test_exchange_returns_response_unmodified(config):
    """Test that the transport response is returned as is."""
    response = TokenResponse(access_token="AT", refresh_token="RT", params={"id_token": "x"})
    transport = MockTransport({"ABC123": response})

    result = await TokenExchangeAdapter(config, transport).exchange("ABC123", "ASSERTION")

    assert result is response
    assert transport.calls == [
        ("ABC123", {"grant_type": "authorization_code", "client_secret": "ASSERTION"}),
    ]


@pytest.mark.asyncio
async def test_exchange_sends_redirect_uri_when_configured(signing_key_pem):
    """Test that callback_url is sent as redirect_uri."""
    config = StrategyConfig(
        client_id="CLIENT_ID",
        team_id="TEAM_ID",
        key_id="KEY_ID",
        signing_key=signing_key_pem,
        callback_url="https://example.com/cb",
    )
    transport = MockTransport({"ABC123": TokenResponse(access_token="AT")})

    await TokenExchangeAdapter(config, transport).exchange("ABC123", "ASSERTION")

    _, options = transport.calls[0]
    assert options["redirect_uri"] == "https://example.com/cb"


@pytest.mark.asyncio
async def test_exchange_invalid_grant(config):
    """Test that an invalid_grant body raises TokenExchangeError."""
    transport = MockTransport()
    transport.add_failure("ABC123", 400, '{"error":"invalid_grant"}')

    with pytest.raises(TokenExchangeError) as exc_info:
        await TokenExchangeAdapter(config, transport).exchange("ABC123", "ASSERTION")

    assert exc_info.value.code == "invalid_grant"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_exchange_unparseable_body(config):
    """Test that an unparseable body raises InternalOAuthError."""
    transport = MockTransport()
    transport.add_failure("ABC123", 502, "<html>Bad Gateway</html>")

    with pytest.raises(InternalOAuthError) as exc_info:
        await TokenExchangeAdapter(config, transport).exchange("ABC123", "ASSERTION")

    assert exc_info.value.status_code == 502
    assert exc_info.value.body == "<html>Bad Gateway</html>"


def test_parse_error_response_with_description():
    """Test parsing error, error_description and error_uri."""
    error = parse_error_response(
        TransportError(
            400,
            '{"error":"invalid_client","error_description":"bad secret","error_uri":"https://x"}',
        )
    )
    assert isinstance(error, TokenExchangeError)
    assert error.code == "invalid_client"
    assert error.description == "bad secret"
    assert error.uri == "https://x"


@pytest.mark.parametrize(
    "body",
    [None, "", "not json", "[]", '{"message":"no error field"}', '{"error":""}'],
)
def test_parse_error_response_falls_back(body):
    """Test that bodies without an error code fall back to InternalOAuthError."""
    error = parse_error_response(TransportError(400, body))
    assert isinstance(error, InternalOAuthError)
    assert error.body == body
    assert error.status_code == 400


def test_parse_error_response_deeply_nested_body():
    """Test that a body nested past the recursion limit falls back to InternalOAuthError."""
    error = parse_error_response(TransportError(400, "[" * 100000))
    assert isinstance(error, InternalOAuthError)
    assert error.status_code == 400
