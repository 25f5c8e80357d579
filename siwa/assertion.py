"""Client assertion signing.

Apple does not issue a static client secret. Instead the client_secret sent
to the token endpoint is a short-lived JWT signed with the developer's
private key (ES256), identified by its key ID.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import jwt
import structlog

from siwa.exceptions import SigningError
from siwa.models import APPLE_ISSUER, StrategyConfig

log = structlog.get_logger()

ASSERTION_ALGORITHM = "ES256"
ASSERTION_AUDIENCE = APPLE_ISSUER


class ClientAssertionSigner:
    """Produces client assertions for a StrategyConfig.

    A new assertion is signed for every token exchange; nothing is cached.
    """

    def __init__(self, config: StrategyConfig):
        self._config = config

    def claims(self, now: int) -> dict[str, Any]:
        """Assertion claims for the given issue time."""
        return {
            "iss": self._config.team_id,
            "iat": now,
            "exp": now + self._config.assertion_lifetime,
            "aud": ASSERTION_AUDIENCE,
            "sub": self._config.client_id,
        }

    def sign(self, now: Optional[int] = None) -> str:
        """Sign a client assertion.

        Args:
            now: Issue time as a Unix timestamp. Defaults to the current time.

        Returns:
            The compact JWT to send as client_secret

        Raises:
            SigningError: If the key is malformed or ES256 is unavailable
        """
        issued_at = int(time.time()) if now is None else int(now)
        try:
            return jwt.encode(
                self.claims(issued_at),
                self._config.signing_key,
                algorithm=ASSERTION_ALGORITHM,
                headers={"kid": self._config.key_id},
            )
        except (jwt.PyJWTError, ValueError, TypeError, NotImplementedError) as e:
            log.error("client_assertion_signing_failed", key_id=self._config.key_id, error=str(e))
            raise SigningError(f"Failed to sign client assertion: {e}") from e


def sign_client_assertion(config: StrategyConfig, now: Optional[int] = None) -> str:
    """Sign a client assertion for config at time now."""
    return ClientAssertionSigner(config).sign(now)
