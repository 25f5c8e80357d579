"""Token exchange with Apple's token endpoint.

Wraps an OAuth2Transport, injecting the signed client assertion as
client_secret, and classifies failures into provider errors
(TokenExchangeError) and everything else (InternalOAuthError).
"""

from __future__ import annotations

import json
from typing import Any, Dict

import structlog

from siwa.core.transport import OAuth2Transport
from siwa.exceptions import (
    InternalOAuthError,
    SiwaError,
    TokenExchangeError,
    TransportError,
)
from siwa.models import StrategyConfig, TokenResponse

log = structlog.get_logger()


def parse_error_response(error: TransportError) -> SiwaError:
    """Classify a failed token request from its response body."""
    try:
        payload = json.loads(error.body) if error.body else None
    except (TypeError, ValueError, RecursionError):
        payload = None

    if isinstance(payload, dict) and payload.get("error"):
        return TokenExchangeError(
            code=str(payload["error"]),
            description=payload.get("error_description"),
            uri=payload.get("error_uri"),
            status_code=error.status_code,
        )

    return InternalOAuthError(
        "Failed to obtain access token",
        status_code=error.status_code,
        body=error.body,
    )


class TokenExchangeAdapter:
    """Exchanges authorization codes using a pluggable transport.

    Args:
        config: Strategy configuration (callback_url becomes redirect_uri)
        transport: The OAuth2 transport performing the HTTP call
    """

    def __init__(self, config: StrategyConfig, transport: OAuth2Transport):
        self._config = config
        self._transport = transport

    def build_options(self, assertion: str) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "grant_type": "authorization_code",
            "client_secret": assertion,
        }
        if self._config.callback_url:
            options["redirect_uri"] = self._config.callback_url
        return options

    async def exchange(self, code: str, assertion: str) -> TokenResponse:
        """Exchange code for tokens.

        Args:
            code: Authorization code from the callback
            assertion: Signed client assertion

        Returns:
            The TokenResponse, unmodified

        Raises:
            TokenExchangeError: If Apple returned an error code (e.g. invalid_grant)
            InternalOAuthError: If the failure could not be classified
        """
        try:
            response = await self._transport.exchange_authorization_code(
                code, self.build_options(assertion)
            )
        except TransportError as e:
            classified = parse_error_response(e)
            log.warning(
                "apple_token_exchange_failed",
                status_code=e.status_code,
                error_code=classified.code,
            )
            raise classified from e

        log.debug(
            "apple_token_exchanged",
            has_refresh_token=response.refresh_token is not None,
        )
        return response
