"""Authorization redirect URL construction."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from siwa.models import CallbackRequest, StrategyConfig

# Apple only delivers the callback as a form post when scopes are requested
RESPONSE_MODE = "form_post"


def _request_state(request: CallbackRequest) -> Optional[str]:
    state = (request.query or {}).get("state")
    if state is None:
        state = (request.body or {}).get("state")
    return state


def build_authorization_url(config: StrategyConfig, request: CallbackRequest) -> str:
    """Build the URL that starts the Sign in with Apple flow.

    Parameter order is fixed: client_id, response_type, response_mode, then
    redirect_uri and scope when configured, then state when the request
    carries one.

    Args:
        config: Strategy configuration
        request: The inbound request; only its state parameter is read

    Returns:
        The authorization URL
    """
    params = [
        ("client_id", config.client_id),
        ("response_type", "code"),
        ("response_mode", RESPONSE_MODE),
    ]
    if config.callback_url:
        params.append(("redirect_uri", config.callback_url))
    if config.scope:
        params.append(("scope", config.scope))

    state = _request_state(request)
    if state is not None:
        params.append(("state", state))

    separator = "&" if "?" in config.authorization_url else "?"
    return f"{config.authorization_url}{separator}{urlencode(params)}"
