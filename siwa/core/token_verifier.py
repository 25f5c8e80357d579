"""Abstract identity token verifier interface.

Signature verification of Apple's identity token is optional. When no
verifier is configured, claims are decoded from the token returned over the
TLS-protected token endpoint.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class IdentityTokenVerifier(ABC):
    """Abstract interface for identity token signature verification."""

    @abstractmethod
    def verify(self, token: str, audience: str) -> Dict[str, Any]:
        """Verify an identity token and return its claims.

        Args:
            token: The encoded identity token
            audience: Expected audience (the configured client_id)

        Returns:
            Dict of verified claims

        Raises:
            ClaimsError: If the token is invalid or its signature does not verify
        """
