"""OAuth2 transport implementations."""

from siwa.transports.http import RequestsTransport

__all__ = [
    "RequestsTransport",
]
