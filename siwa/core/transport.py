"""Abstract OAuth2 transport interface.

The transport performs the HTTP call to the token endpoint. It knows nothing
about Apple's client assertion; the exchange adapter hands it a ready-made
client_secret in the options.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from siwa.models import TokenResponse


class OAuth2Transport(ABC):
    """Abstract interface for the authorization-code token request.

    Implementations:
        - RequestsTransport: HTTP via requests
        - MockTransport: In-memory for testing
    """

    @abstractmethod
    async def exchange_authorization_code(
        self,
        code: str,
        options: Dict[str, Any],
    ) -> TokenResponse:
        """Exchange an authorization code for tokens.

        Args:
            code: The authorization code received on the callback
            options: Extra form parameters (grant_type, client_secret,
                redirect_uri when configured)

        Returns:
            TokenResponse with access token, optional refresh token and the
            full decoded payload in params

        Raises:
            TransportError: With the HTTP status and raw body on failure
        """
