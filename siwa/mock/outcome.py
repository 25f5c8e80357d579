"""Recording outcome handler for tests and local development."""

from typing import Any, List, Optional, Tuple

from siwa.core.outcome import OutcomeHandler


class RecordingOutcomeHandler(OutcomeHandler):
    """OutcomeHandler that records every call it receives."""

    def __init__(self):
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def redirect(self, url: str) -> None:
        self.calls.append(("redirect", (url,)))

    def fail(self, info: Any) -> None:
        self.calls.append(("fail", (info,)))

    def success(self, user: Any, info: Any = None) -> None:
        self.calls.append(("success", (user, info)))

    def error(self, error: BaseException) -> None:
        self.calls.append(("error", (error,)))

    @property
    def last(self) -> Optional[Tuple[str, Tuple[Any, ...]]]:
        return self.calls[-1] if self.calls else None
