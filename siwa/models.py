"""Sign in with Apple models - configuration, claims, profiles and outcomes."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from siwa.exceptions import ConfigurationError

APPLE_ISSUER = "https://appleid.apple.com"
AUTHORIZATION_URL = "https://appleid.apple.com/auth/authorize"
TOKEN_URL = "https://appleid.apple.com/auth/token"

# Client assertions default to five minutes; Apple rejects anything over six months
DEFAULT_ASSERTION_LIFETIME = 300
MAX_ASSERTION_LIFETIME = 15777000

_REQUIRED_OPTIONS = ("client_id", "team_id", "key_id", "signing_key")


@dataclass(frozen=True)
class StrategyConfig:
    """Configuration for the Apple strategy.

    client_id, team_id, key_id and signing_key are required. signing_key is
    the PEM-encoded P-256 private key downloaded from the Apple developer
    portal, identified there by key_id.
    """

    client_id: Optional[str] = None  # Services ID
    team_id: Optional[str] = None
    key_id: Optional[str] = None
    signing_key: Optional[str] = None
    authorization_url: str = AUTHORIZATION_URL
    token_url: str = TOKEN_URL
    callback_url: Optional[str] = None
    scope: Optional[str] = None  # e.g. "name email"
    assertion_lifetime: int = DEFAULT_ASSERTION_LIFETIME

    def __post_init__(self) -> None:
        for option in _REQUIRED_OPTIONS:
            if not getattr(self, option):
                raise ConfigurationError(option)
        if not 0 < self.assertion_lifetime <= MAX_ASSERTION_LIFETIME:
            raise ConfigurationError(
                "assertion_lifetime",
                f"assertion_lifetime must be between 1 and {MAX_ASSERTION_LIFETIME} seconds",
            )

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]]) -> "StrategyConfig":
        """Build a config from a mapping of option names to values.

        Raises:
            ConfigurationError: If an option is unknown or a required one is missing
        """
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        for option in options:
            if option not in known:
                raise ConfigurationError(
                    option, f"AppleStrategy does not recognize the {option} option"
                )
        return cls(**options)

    @classmethod
    def from_env(
        cls,
        prefix: str = "APPLE_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "StrategyConfig":
        """Build a config from environment variables.

        Reads {prefix}CLIENT_ID, {prefix}TEAM_ID, {prefix}KEY_ID and either
        {prefix}PRIVATE_KEY (inline PEM) or {prefix}PRIVATE_KEY_PATH. Optional:
        {prefix}CALLBACK_URL, {prefix}SCOPE, {prefix}ASSERTION_LIFETIME.

        Raises:
            ConfigurationError: If a required variable is missing
        """
        env = os.environ if environ is None else environ

        signing_key = env.get(f"{prefix}PRIVATE_KEY")
        key_path = env.get(f"{prefix}PRIVATE_KEY_PATH")
        if not signing_key and key_path:
            signing_key = Path(key_path).read_text()

        lifetime = env.get(f"{prefix}ASSERTION_LIFETIME")
        try:
            assertion_lifetime = int(lifetime) if lifetime else DEFAULT_ASSERTION_LIFETIME
        except ValueError as e:
            raise ConfigurationError(
                "assertion_lifetime",
                f"{prefix}ASSERTION_LIFETIME must be an integer number of seconds",
            ) from e

        return cls(
            client_id=env.get(f"{prefix}CLIENT_ID"),
            team_id=env.get(f"{prefix}TEAM_ID"),
            key_id=env.get(f"{prefix}KEY_ID"),
            signing_key=signing_key,
            callback_url=env.get(f"{prefix}CALLBACK_URL"),
            scope=env.get(f"{prefix}SCOPE"),
            assertion_lifetime=assertion_lifetime,
        )


@dataclass
class CallbackRequest:
    """Inbound request as handed over by the host framework.

    Apple posts the callback as a form (response_mode=form_post), so code,
    error, user and state arrive in body. The initial leg may carry state in
    the query string.
    """

    query: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class TokenResponse:
    """Successful token endpoint response."""

    access_token: str
    refresh_token: Optional[str] = None
    params: dict[str, Any] = field(default_factory=dict)  # Full payload, incl. id_token


@dataclass
class IdentityClaims:
    """Claims extracted from Apple's identity token."""

    subject: str
    issuer: str
    audience: Union[str, list[str]]
    expires_at: int
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    is_private_email: Optional[bool] = None
    raw_claims: dict[str, Any] | None = None


@dataclass
class UserNameInfo:
    """Name shared by the user, only sent on the first authorization."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass
class NormalizedProfile:
    """Profile handed to the verify callback."""

    id: str  # Identity token subject
    email: Optional[str] = None
    name: Optional[UserNameInfo] = None
    raw: dict[str, Any] = field(default_factory=dict)
    provider: str = "apple"


# ==================== Outcomes ====================


class OutcomeKind(str, Enum):
    """Terminal result of one strategy invocation."""

    REDIRECT = "redirect"
    FAIL = "fail"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class FailureInfo:
    """Info attached to a Fail outcome produced by the strategy itself."""

    message: str
    code: Optional[str] = None


@dataclass
class Redirect:
    url: str
    kind: OutcomeKind = field(default=OutcomeKind.REDIRECT, init=False)


@dataclass
class Fail:
    info: Any = None
    kind: OutcomeKind = field(default=OutcomeKind.FAIL, init=False)


@dataclass
class Success:
    user: Any
    info: Any = None
    kind: OutcomeKind = field(default=OutcomeKind.SUCCESS, init=False)


@dataclass
class Error:
    error: BaseException
    kind: OutcomeKind = field(default=OutcomeKind.ERROR, init=False)


Outcome = Union[Redirect, Fail, Success, Error]
