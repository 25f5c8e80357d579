"""HTTP transport for Apple's token endpoint using requests."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import requests
import structlog

from siwa.core.transport import OAuth2Transport
from siwa.exceptions import TransportError
from siwa.models import TOKEN_URL, TokenResponse

log = structlog.get_logger()


class RequestsTransport(OAuth2Transport):
    """Posts the authorization-code grant to the token endpoint.

    requests is synchronous, so each call runs in a worker thread and does
    not block the event loop.

    Example:
        transport = RequestsTransport(client_id="com.example.web")
        tokens = await transport.exchange_authorization_code(code, options)
    """

    def __init__(
        self,
        client_id: str,
        token_url: str = TOKEN_URL,
        timeout: float = 10.0,  # 10 seconds default
        session: Optional[requests.Session] = None,
    ):
        """Initialize the transport.

        Args:
            client_id: Services ID sent as client_id
            token_url: Token endpoint URL
            timeout: HTTP request timeout in seconds (default: 10.0)
            session: Optional requests.Session for connection reuse
        """
        self._client_id = client_id
        self._token_url = token_url
        self._timeout = timeout
        self._session = session

    def _post(self, data: Dict[str, Any]) -> requests.Response:
        poster = self._session if self._session is not None else requests
        return poster.post(
            self._token_url,
            data=data,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )

    async def exchange_authorization_code(
        self,
        code: str,
        options: Dict[str, Any],
    ) -> TokenResponse:
        """Exchange an authorization code at the token endpoint."""
        data = {"client_id": self._client_id, "code": code}
        data.update(options)

        try:
            response = await asyncio.to_thread(self._post, data)
        except requests.RequestException as e:
            log.error("token_endpoint_unreachable", token_url=self._token_url, error=str(e))
            raise TransportError(None, str(e)) from e

        if not response.ok:
            raise TransportError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(response.status_code, response.text) from e

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise TransportError(response.status_code, response.text)

        return TokenResponse(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            params=payload,
        )
