"""Collaborator interfaces for the Sign in with Apple strategy."""

from siwa.core.outcome import OutcomeChannel, OutcomeHandler
from siwa.core.token_verifier import IdentityTokenVerifier
from siwa.core.transport import OAuth2Transport

__all__ = [
    "IdentityTokenVerifier",
    "OAuth2Transport",
    "OutcomeChannel",
    "OutcomeHandler",
]
