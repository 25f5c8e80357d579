"""siwa - Sign in with Apple authentication strategy.

siwa drives the Sign in with Apple flow on top of the OAuth2
authorization-code grant.

Features:
- Authorization redirect with form_post response mode
- ES256-signed client assertions as client_secret
- Token exchange over a pluggable transport with error classification
- Identity token claim extraction, optional signature verifier
- First-login name data accepted as JSON string or object
- Exactly-once outcome delivery to the host framework
"""

from siwa.assertion import ClientAssertionSigner, sign_client_assertion
from siwa.authorization import build_authorization_url
from siwa.claims import IdentityClaimsExtractor
from siwa.core.outcome import OutcomeChannel, OutcomeHandler
from siwa.core.token_verifier import IdentityTokenVerifier
from siwa.core.transport import OAuth2Transport
from siwa.exceptions import (
    ClaimsError,
    ConfigurationError,
    DuplicateOutcomeError,
    InternalOAuthError,
    SigningError,
    SiwaError,
    TokenExchangeError,
    TransportError,
)
from siwa.exchange import TokenExchangeAdapter
from siwa.models import (
    CallbackRequest,
    Error,
    Fail,
    FailureInfo,
    IdentityClaims,
    NormalizedProfile,
    Outcome,
    OutcomeKind,
    Redirect,
    StrategyConfig,
    Success,
    TokenResponse,
    UserNameInfo,
)
from siwa.profile import normalize, parse_user_info
from siwa.strategy import AppleStrategy
from siwa.transports import RequestsTransport

__version__ = "0.1.0"

__all__ = [
    # Strategy (recommended entry point)
    "AppleStrategy",
    # Components
    "ClientAssertionSigner",
    "IdentityClaimsExtractor",
    "TokenExchangeAdapter",
    "build_authorization_url",
    "normalize",
    "parse_user_info",
    "sign_client_assertion",
    # Collaborator interfaces
    "IdentityTokenVerifier",
    "OAuth2Transport",
    "OutcomeChannel",
    "OutcomeHandler",
    "RequestsTransport",
    # Models
    "CallbackRequest",
    "IdentityClaims",
    "NormalizedProfile",
    "StrategyConfig",
    "TokenResponse",
    "UserNameInfo",
    # Outcomes
    "Error",
    "Fail",
    "FailureInfo",
    "Outcome",
    "OutcomeKind",
    "Redirect",
    "Success",
    # Exceptions
    "SiwaError",
    "ClaimsError",
    "ConfigurationError",
    "DuplicateOutcomeError",
    "InternalOAuthError",
    "SigningError",
    "TokenExchangeError",
    "TransportError",
]
