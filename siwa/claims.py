"""Identity claims extraction from Apple's id_token."""

from __future__ import annotations

from typing import Any, Dict, Optional

import jwt
import structlog

from siwa.core.token_verifier import IdentityTokenVerifier
from siwa.exceptions import ClaimsError
from siwa.models import APPLE_ISSUER, IdentityClaims, StrategyConfig, TokenResponse

log = structlog.get_logger()

ID_TOKEN_FIELD = "id_token"

_REQUIRED_CLAIMS = (
    ("sub", "subject"),
    ("iss", "issuer"),
    ("aud", "audience"),
    ("exp", "expiry"),
)


def _as_bool(value: Any) -> Optional[bool]:
    """Apple sends boolean claims either as JSON booleans or as strings."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


class IdentityClaimsExtractor:
    """Decodes the identity token returned by the token endpoint.

    Without a verifier the payload is decoded without signature verification;
    the token was received directly from Apple over TLS. With a verifier, the
    verifier decides which claims to trust.

    Args:
        config: Strategy configuration (client_id is the expected audience)
        verifier: Optional IdentityTokenVerifier
    """

    def __init__(
        self,
        config: StrategyConfig,
        verifier: Optional[IdentityTokenVerifier] = None,
    ):
        self._config = config
        self._verifier = verifier

    def _decode(self, token: str) -> Dict[str, Any]:
        if self._verifier is not None:
            return self._verifier.verify(token, audience=self._config.client_id)
        try:
            return jwt.decode(
                token,
                options={"verify_signature": False, "verify_aud": False},
            )
        except jwt.InvalidTokenError as e:
            raise ClaimsError(f"Failed to decode identity token: {e}") from e

    def extract(self, token_response: TokenResponse) -> IdentityClaims:
        """Extract identity claims from a token response.

        Raises:
            ClaimsError: If the id_token is absent, undecodable, lacks a
                required claim, or was issued by someone else or for another
                client
        """
        token = (token_response.params or {}).get(ID_TOKEN_FIELD)
        if not token:
            raise ClaimsError("Token response missing id_token")

        claims = self._decode(token)

        for key, label in _REQUIRED_CLAIMS:
            if claims.get(key) in (None, ""):
                raise ClaimsError(f"Identity token missing {label}")

        issuer = claims["iss"]
        if issuer != APPLE_ISSUER:
            log.warning("identity_token_issuer_mismatch", issuer=issuer)
            raise ClaimsError(f"Unexpected identity token issuer: {issuer}")

        audience = claims["aud"]
        audiences = audience if isinstance(audience, list) else [audience]
        if self._config.client_id not in audiences:
            log.warning("identity_token_audience_mismatch", audience=audience)
            raise ClaimsError("Identity token audience mismatch")

        try:
            expires_at = int(claims["exp"])
        except (TypeError, ValueError, OverflowError) as e:
            raise ClaimsError("Identity token has invalid expiry") from e

        return IdentityClaims(
            subject=str(claims["sub"]),
            issuer=issuer,
            audience=audience,
            expires_at=expires_at,
            email=claims.get("email"),
            email_verified=_as_bool(claims.get("email_verified")),
            is_private_email=_as_bool(claims.get("is_private_email")),
            raw_claims=claims,
        )
