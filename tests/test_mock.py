"""Tests for mock collaborators."""

import json

import jwt
import pytest

from siwa.exceptions import TransportError
from siwa.mock import MOCK_SIGNING_SECRET, MockTransport


@pytest.mark.asyncio
async def test_add_identity_mints_id_token():
    """Test that add_identity registers a decodable id_token."""
    transport = MockTransport()
    registered = transport.add_identity("CODE", audience="com.example.web", subject="001234.abc", email="a@b.c")

    tokens = await transport.exchange_authorization_code("CODE", {"grant_type": "authorization_code"})

    assert tokens is registered
    assert tokens.params["access_token"] == tokens.access_token
    claims = jwt.decode(
        tokens.params["id_token"],
        MOCK_SIGNING_SECRET,
        algorithms=["HS256"],
        audience="com.example.web",
    )
    assert claims["sub"] == "001234.abc"
    assert claims["email"] == "a@b.c"
    assert claims["iss"] == "https://appleid.apple.com"


@pytest.mark.asyncio
async def test_unknown_code_is_invalid_grant():
    """Test that unknown codes fail with invalid_grant."""
    transport = MockTransport()

    with pytest.raises(TransportError) as exc_info:
        await transport.exchange_authorization_code("NOPE", {"grant_type": "authorization_code"})

    assert exc_info.value.status_code == 400
    assert json.loads(exc_info.value.body) == {"error": "invalid_grant"}


@pytest.mark.asyncio
async def test_wrong_grant_type_is_invalid_grant():
    """Test that a wrong grant_type fails with invalid_grant."""
    transport = MockTransport()
    transport.add_identity("CODE", audience="com.example.web", subject="x")

    with pytest.raises(TransportError):
        await transport.exchange_authorization_code("CODE", {"grant_type": "refresh_token"})


@pytest.mark.asyncio
async def test_calls_are_recorded():
    """Test that every exchange call is recorded."""
    transport = MockTransport()
    transport.add_failure("CODE", 503, None)

    with pytest.raises(TransportError):
        await transport.exchange_authorization_code("CODE", {"client_secret": "S"})

    assert transport.calls == [("CODE", {"client_secret": "S"})]
