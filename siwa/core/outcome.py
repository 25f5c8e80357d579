"""Outcome delivery to the host framework.

The host supplies an OutcomeHandler with one method per outcome. The strategy
never calls the handler directly; it goes through an OutcomeChannel, which
guarantees a single delivery per invocation and turns delivery into a no-op
once the host has discarded the request.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any

import structlog

from siwa.exceptions import DuplicateOutcomeError
from siwa.models import Error, Fail, Outcome, Redirect, Success

log = structlog.get_logger()


class OutcomeHandler(ABC):
    """Host-side callbacks, exactly one of which is invoked per request."""

    @abstractmethod
    def redirect(self, url: str) -> None:
        """Send the user agent to url."""

    @abstractmethod
    def fail(self, info: Any) -> None:
        """Authentication did not succeed (e.g. the user declined)."""

    @abstractmethod
    def success(self, user: Any, info: Any = None) -> None:
        """Authentication succeeded for user."""

    @abstractmethod
    def error(self, error: BaseException) -> None:
        """The protocol failed."""


class OutcomeChannel:
    """Single-fire delivery of an Outcome to an OutcomeHandler.

    Args:
        handler: The host's outcome callbacks
    """

    def __init__(self, handler: OutcomeHandler):
        self._handler = handler
        self._lock = threading.Lock()
        self._delivered = False
        self._discarded = False

    @property
    def delivered(self) -> bool:
        return self._delivered

    @property
    def discarded(self) -> bool:
        return self._discarded

    def discard(self) -> None:
        """Mark the request as gone; later deliveries are dropped."""
        with self._lock:
            self._discarded = True

    def deliver(self, outcome: Outcome) -> bool:
        """Deliver outcome to the handler.

        Returns:
            True if the handler was invoked, False if the request was discarded

        Raises:
            DuplicateOutcomeError: If an outcome was already delivered
        """
        with self._lock:
            if self._delivered:
                raise DuplicateOutcomeError(
                    f"Outcome already delivered, refusing {outcome.kind.value}"
                )
            self._delivered = True
            if self._discarded:
                log.debug("outcome_dropped", kind=outcome.kind.value)
                return False

        if isinstance(outcome, Redirect):
            self._handler.redirect(outcome.url)
        elif isinstance(outcome, Fail):
            self._handler.fail(outcome.info)
        elif isinstance(outcome, Success):
            self._handler.success(outcome.user, outcome.info)
        elif isinstance(outcome, Error):
            self._handler.error(outcome.error)
        else:
            raise TypeError(f"Unknown outcome: {outcome!r}")
        return True
