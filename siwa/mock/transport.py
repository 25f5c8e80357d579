"""Mock OAuth2 transport for local development without Apple.

Implements the OAuth2Transport interface with an in-memory table of
authorization codes.
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

import jwt

from siwa.core.transport import OAuth2Transport
from siwa.exceptions import TransportError
from siwa.models import APPLE_ISSUER, TokenResponse

# Mock id tokens are signed with a throwaway HMAC secret; they are decoded,
# never verified, unless a verifier is configured
MOCK_SIGNING_SECRET = "siwa-mock-secret"


class MockTransport(OAuth2Transport):
    """Mock transport that answers from registered authorization codes.

    Unknown codes fail the way Apple does: HTTP 400 with
    {"error": "invalid_grant"}.

    Example:
        transport = MockTransport()
        transport.add_identity("CODE", audience="com.example.web", subject="001234.abc")
    """

    def __init__(self, responses: Optional[Dict[str, TokenResponse]] = None):
        self._responses: Dict[str, TokenResponse] = dict(responses or {})
        self._failures: Dict[str, Tuple[Optional[int], Optional[str]]] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def add_code(self, code: str, response: TokenResponse) -> None:
        """Register the token response returned for code."""
        self._responses[code] = response

    def add_failure(self, code: str, status_code: Optional[int], body: Optional[str]) -> None:
        """Make code fail with the given status and raw body."""
        self._failures[code] = (status_code, body)

    def add_identity(
        self,
        code: str,
        audience: str,
        subject: str,
        email: Optional[str] = None,
        expires_in: int = 3600,
        **claims: Any,
    ) -> TokenResponse:
        """Register code with a freshly minted id_token for subject."""
        now = int(time.time())
        payload: Dict[str, Any] = {
            "iss": APPLE_ISSUER,
            "aud": audience,
            "sub": subject,
            "iat": now,
            "exp": now + expires_in,
        }
        if email is not None:
            payload["email"] = email
        payload.update(claims)

        response = TokenResponse(
            access_token=f"mock-at-{uuid.uuid4().hex}",
            refresh_token=f"mock-rt-{uuid.uuid4().hex}",
            params={
                "token_type": "Bearer",
                "expires_in": expires_in,
                "id_token": jwt.encode(payload, MOCK_SIGNING_SECRET, algorithm="HS256"),
            },
        )
        response.params["access_token"] = response.access_token
        response.params["refresh_token"] = response.refresh_token
        self.add_code(code, response)
        return response

    async def exchange_authorization_code(
        self,
        code: str,
        options: Dict[str, Any],
    ) -> TokenResponse:
        """Return the registered response for code or fail like Apple."""
        self.calls.append((code, dict(options)))

        if code in self._failures:
            raise TransportError(*self._failures[code])

        if options.get("grant_type") != "authorization_code" or code not in self._responses:
            raise TransportError(400, json.dumps({"error": "invalid_grant"}))

        return self._responses[code]
