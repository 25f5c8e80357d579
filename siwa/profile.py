"""Profile normalization.

Apple sends the user's name only on the first authorization, in a "user"
form field that may arrive as a JSON string or, when the host has already
decoded it, as a mapping.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

import structlog

from siwa.models import IdentityClaims, NormalizedProfile, UserNameInfo

log = structlog.get_logger()

USER_FIELD = "user"


def parse_user_info(value: Any) -> Optional[UserNameInfo]:
    """Parse the "user" field into a UserNameInfo.

    Accepts a mapping or its JSON encoding. Malformed data yields None; it
    never aborts the login.
    """
    if value is None or value == "":
        return None

    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except (ValueError, RecursionError):
            log.warning("apple_user_field_malformed")
            return None

    if not isinstance(value, Mapping):
        log.warning("apple_user_field_unexpected_type", value_type=type(value).__name__)
        return None

    name = value.get("name")
    if not isinstance(name, Mapping):
        return None

    return UserNameInfo(
        first_name=name.get("firstName"),
        last_name=name.get("lastName"),
    )


def normalize(
    claims: IdentityClaims,
    body: Optional[Mapping[str, Any]],
    raw: Optional[dict[str, Any]] = None,
) -> NormalizedProfile:
    """Merge identity claims with the optional first-login name data.

    Args:
        claims: Claims extracted from the identity token
        body: The callback form body
        raw: The token endpoint payload, kept on the profile

    Returns:
        NormalizedProfile
    """
    return NormalizedProfile(
        id=claims.subject,
        email=claims.email,
        name=parse_user_info((body or {}).get(USER_FIELD)),
        raw=raw if raw is not None else {},
    )
