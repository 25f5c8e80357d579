"""Shared pytest fixtures for siwa tests."""

import pytest
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from siwa.models import StrategyConfig


@pytest.fixture(scope="session")
def ec_key():
    """P-256 private key, the kind Apple issues for Sign in with Apple."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def signing_key_pem(ec_key):
    return ec_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture(scope="session")
def public_key_pem(ec_key):
    return ec_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")


@pytest.fixture
def config(signing_key_pem):
    return StrategyConfig(
        client_id="CLIENT_ID",
        team_id="TEAM_ID",
        key_id="KEY_ID",
        signing_key=signing_key_pem,
    )


@pytest.fixture
def make_id_token():
    """Mint an id_token like Apple's (HS256; the signature is never checked)."""

    def _make(subject="SUBJECT", audience="CLIENT_ID", issuer="https://appleid.apple.com", **claims):
        payload = {"aud": audience, "exp": 4102444800, "iat": 1700000000}
        if issuer is not None:
            payload["iss"] = issuer
        if subject is not None:
            payload["sub"] = subject
        payload.update(claims)
        return jwt.encode(payload, "secret", algorithm="HS256")

    return _make
