"""Completion signal for native jobs.

The surface calls JobCallback.on_complete() on a thread vixlib does not
control. CompletionSignal publishes that single event to any number of
waiting threads. It is write-once: the first signal() wins and the flag
never resets.
"""

from __future__ import annotations

import threading
import time

from vixlib._logging import get_logger
from vixlib.surface import Handle

logger = get_logger(__name__)


class CompletionSignal:
    """Single-fire, thread-safe completion flag."""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def signal(self) -> None:
        """Mark the job complete. Safe from any thread; repeated calls are no-ops."""
        self._event.set()

    @property
    def is_signaled(self) -> bool:
        return self._event.is_set()

    def wait_until(self, deadline: float) -> bool:
        """Block until signaled or until *deadline* (``time.monotonic()`` clock).

        Returns:
            True if the signal was set, False if the deadline passed first.
        """
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return self._event.is_set()
        return self._event.wait(remaining)

    def wait(self, timeout: float) -> bool:
        """Relative form of wait_until()."""
        return self.wait_until(time.monotonic() + timeout)


class JobCallback:
    """Adapts the surface's on_complete() callback to a CompletionSignal."""

    def __init__(self, signal: CompletionSignal | None = None) -> None:
        self.signal = signal or CompletionSignal()

    def on_complete(self, job: Handle) -> None:
        if self.signal.is_signaled:
            logger.debug("Duplicate completion callback ignored", extra={"job": repr(job)})
            return
        self.signal.signal()
