"""Mock collaborators for testing without Apple."""

from siwa.mock.outcome import RecordingOutcomeHandler
from siwa.mock.transport import MOCK_SIGNING_SECRET, MockTransport

__all__ = [
    "MOCK_SIGNING_SECRET",
    "MockTransport",
    "RecordingOutcomeHandler",
]
